from django.urls import path

from . import views

app_name = 'accounts'

urlpatterns = [
    path('auth/user/', views.current_user, name='current_user'),
    path('user/settings/', views.user_settings, name='user_settings'),
    path('admin/users/', views.admin_user_list, name='admin_user_list'),
    path('admin/users/<uuid:user_id>/', views.admin_user_detail, name='admin_user_detail'),
    path('admin/stats/', views.admin_stats, name='admin_stats'),
    path('subscription-tiers/', views.subscription_tiers, name='subscription_tiers'),
]
