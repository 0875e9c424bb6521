"""
URL configuration for verification app.
"""
from django.urls import path
from apps.verification import views

app_name = 'verification'

urlpatterns = [
    # Approval queue
    path('admin/queue/', views.approval_queue, name='approval_queue'),

    # Single transitions
    path('admin/<str:kind>/<str:entity_id>/approve/', views.approve_application, name='approve_application'),
    path('admin/<str:kind>/<str:entity_id>/reject/', views.reject_application, name='reject_application'),
    path('admin/<str:kind>/<str:entity_id>/reset/', views.reset_application, name='reset_application'),
    path('admin/<str:kind>/<str:entity_id>/history/', views.application_history, name='application_history'),

    # Bulk actions and selection
    path('admin/bulk/', views.bulk_verification, name='bulk_verification'),
    path('admin/selection/<str:queue>/', views.selection, name='selection'),
]
