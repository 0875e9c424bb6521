"""
Admin panel configuration for the admin action log.
"""
from django.contrib import admin
from django.utils.html import format_html
from common.models import AdminActionLog


@admin.register(AdminActionLog)
class AdminActionLogAdmin(admin.ModelAdmin):
    """Read-only view of console admin actions"""

    list_display = ['admin_email', 'action_display', 'target', 'ip_address', 'timestamp']
    list_filter = ['action', 'target_type', 'timestamp']
    search_fields = ['admin_user__email', 'target_id', 'ip_address']
    readonly_fields = ['admin_user', 'action', 'target_type', 'target_id', 'details',
                       'ip_address', 'timestamp']
    date_hierarchy = 'timestamp'

    fieldsets = (
        ('Action Information', {
            'fields': ('admin_user', 'action', 'target_type', 'target_id')
        }),
        ('Details', {
            'fields': ('details',)
        }),
        ('Request Information', {
            'fields': ('ip_address',)
        }),
        ('Timestamp', {
            'fields': ('timestamp',)
        }),
    )

    def admin_email(self, obj):
        return obj.admin_user.email
    admin_email.short_description = 'Admin'
    admin_email.admin_order_field = 'admin_user__email'

    def target(self, obj):
        if not obj.target_id:
            return '-'
        return f"{obj.target_type} {obj.target_id}"
    target.short_description = 'Target'

    def action_display(self, obj):
        colors = {
            'APPROVE_VERIFICATION': '#28A745',
            'REJECT_VERIFICATION': '#DC3545',
            'RESET_VERIFICATION': '#FFC107',
            'BULK_VERIFICATION': '#007BFF',
            'BULK_LISTING_ACTION': '#17A2B8',
            'BULK_CATEGORY_ACTION': '#17A2B8',
        }
        color = colors.get(obj.action, '#6C757D')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_action_display()
        )
    action_display.short_description = 'Action'
    action_display.admin_order_field = 'action'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser
