from django.contrib import admin
from django.urls import include, path

from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', views.health, name='health'),
    path('api/env-status/', views.env_status, name='env_status'),
    path('api/', include('accounts.urls')),
    path('api/', include('fridges.urls')),
    path('api/', include('checklists.urls')),
    path('api/', include('audits.urls')),
]
