from django.urls import path

from . import views

app_name = 'audits'

urlpatterns = [
    path('audit-templates/', views.template_list, name='template_list'),
    path('audit-templates/default/', views.seed_default, name='seed_default'),
    path('audit-templates/<uuid:template_id>/', views.template_detail, name='template_detail'),
    path('audit-completions/', views.completion_list, name='completion_list'),
    path('audit-completions/<uuid:completion_id>/', views.completion_detail, name='completion_detail'),
    path('compliance/overview/', views.compliance_overview, name='compliance_overview'),
]
