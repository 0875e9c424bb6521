"""
URL configuration for marketplace admin endpoints.
"""
from django.urls import path
from apps.marketplace import views

app_name = 'marketplace'

urlpatterns = [
    path('admin/listings/', views.list_listings, name='list_listings'),
    path('admin/listings/bulk/', views.listing_bulk_action, name='listing_bulk_action'),
    path('admin/categories/', views.list_categories, name='list_categories'),
    path('admin/categories/bulk/', views.category_bulk_action, name='category_bulk_action'),
]
