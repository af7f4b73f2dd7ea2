from django.urls import path

from . import views

app_name = 'fridges'

urlpatterns = [
    path('fridges/', views.fridge_list, name='fridge_list'),
    path('fridges/<uuid:fridge_id>/', views.fridge_detail, name='fridge_detail'),
    path('fridges/<uuid:fridge_id>/logs/', views.fridge_logs, name='fridge_logs'),
    path('fridges/<uuid:fridge_id>/time-windows/', views.fridge_time_windows, name='fridge_time_windows'),
    path('labels/', views.label_list, name='label_list'),
    path('export/temperature-logs/', views.export_temperature_logs, name='export_temperature_logs'),
    path('export/compliance-report/', views.export_compliance_report, name='export_compliance_report'),
]
