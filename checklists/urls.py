from django.urls import path

from . import views

app_name = 'checklists'

urlpatterns = [
    path('checklists/', views.checklist_list, name='checklist_list'),
    path('checklists/calendar/', views.checklist_calendar, name='checklist_calendar'),
    path('checklists/summaries/', views.checklist_summaries, name='checklist_summaries'),
    path('checklists/due/', views.checklist_due, name='checklist_due'),
    path('checklists/<uuid:checklist_id>/', views.checklist_detail, name='checklist_detail'),
    path('checklists/<uuid:checklist_id>/reorder/', views.checklist_reorder, name='checklist_reorder'),
    path('checklists/<uuid:checklist_id>/schedule/', views.checklist_schedule, name='checklist_schedule'),
    path('checklists/<uuid:checklist_id>/complete/', views.checklist_complete, name='checklist_complete'),
]
