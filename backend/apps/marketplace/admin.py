"""
Admin configuration for marketplace models.
"""
from django.contrib import admin
from apps.marketplace.models import Category, Listing


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_available', 'is_flagged', 'created_at']
    list_filter = ['is_available', 'is_flagged']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['flagged_at', 'flagged_by', 'created_at', 'updated_at']


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['title', 'vendor', 'category', 'price', 'status', 'is_featured', 'is_flagged']
    list_filter = ['status', 'is_featured', 'is_flagged', 'flag_reason']
    search_fields = ['title', 'vendor__name']
    readonly_fields = ['flagged_at', 'flagged_by', 'created_at', 'updated_at']
    raw_id_fields = ['vendor', 'category']

    fieldsets = (
        ('Listing', {
            'fields': ('vendor', 'category', 'title', 'description', 'price', 'status', 'is_featured')
        }),
        ('Moderation', {
            'fields': ('is_flagged', 'flag_reason', 'flag_notes', 'flagged_at', 'flagged_by')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
