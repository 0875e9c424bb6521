"""
Verification admin configuration.
"""
from django.contrib import admin
from apps.verification.models import Restaurant, Vendor, VerificationAuditLog


class BusinessEntityAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'approval_status', 'verification_status', 'is_verified', 'created_at']
    list_filter = ['verification_status', 'approval_status', 'is_verified', 'created_at']
    search_fields = ['name', 'email', 'phone', 'owner__email', 'owner__name']
    # Status changes go through the approval API so they land in the audit trail
    readonly_fields = [
        'approval_status', 'verification_status', 'is_verified', 'verification_date',
        'status_updated_at', 'status_updated_by', 'last_reviewed_at', 'created_at', 'updated_at'
    ]


@admin.register(Vendor)
class VendorAdmin(BusinessEntityAdmin):
    list_display = BusinessEntityAdmin.list_display + ['business_type']


@admin.register(Restaurant)
class RestaurantAdmin(BusinessEntityAdmin):
    list_display = BusinessEntityAdmin.list_display + ['cuisine_type']


@admin.register(VerificationAuditLog)
class VerificationAuditLogAdmin(admin.ModelAdmin):
    list_display = ['kind', 'entity_id', 'entity_name', 'action', 'from_status', 'to_status', 'bulk', 'timestamp']
    list_filter = ['kind', 'action', 'bulk', 'timestamp']
    search_fields = ['entity_id', 'entity_name', 'performed_by__email']
    readonly_fields = [
        'kind', 'entity_id', 'entity_name', 'action', 'from_status', 'to_status',
        'reason', 'bulk', 'performed_by', 'ip_address', 'timestamp'
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
