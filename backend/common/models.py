"""
Audit logging models for admin actions taken from the console.
"""
from django.db import models
from django.conf import settings


class AdminActionLog(models.Model):
    """Log all admin actions"""

    class Action(models.TextChoices):
        APPROVE_VERIFICATION = 'APPROVE_VERIFICATION', 'Approve Verification'
        REJECT_VERIFICATION = 'REJECT_VERIFICATION', 'Reject Verification'
        RESET_VERIFICATION = 'RESET_VERIFICATION', 'Reset Verification'
        BULK_VERIFICATION = 'BULK_VERIFICATION', 'Bulk Verification'
        BULK_LISTING_ACTION = 'BULK_LISTING_ACTION', 'Bulk Listing Action'
        BULK_CATEGORY_ACTION = 'BULK_CATEGORY_ACTION', 'Bulk Category Action'

    admin_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='admin_actions_performed',
        help_text="Admin who performed the action"
    )
    action = models.CharField(
        max_length=30,
        choices=Action.choices,
        db_index=True
    )
    target_type = models.CharField(
        max_length=20,
        blank=True,
        help_text="Kind of entity affected (vendor, restaurant, listing, category)"
    )
    target_id = models.CharField(
        max_length=64,
        blank=True,
        help_text="Entity affected by the action; empty for bulk actions"
    )
    details = models.JSONField(
        default=dict,
        help_text="Additional details about the action"
    )
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True
    )
    timestamp = models.DateTimeField(
        auto_now_add=True,
        db_index=True
    )

    class Meta:
        db_table = 'admin_action_log'
        verbose_name = 'Admin Action Log'
        verbose_name_plural = 'Admin Action Logs'
        ordering = ['-timestamp']

    def __str__(self):
        target = f"→ {self.target_type} {self.target_id}" if self.target_id else ""
        return f"{self.admin_user.email} {self.get_action_display()} {target} @ {self.timestamp}"
