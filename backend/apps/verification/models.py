"""
Business verification models - Vendors, Restaurants and their audit trail.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.verification.constants import EntityKind, VerificationStatus


class BusinessEntity(models.Model):
    """
    A business that applies to sell on the marketplace.

    ``approval_status`` is the legacy tri-state field. It is kept for
    historical display only and is never written once ``verification_status``
    is set; a null ``verification_status`` means the record predates the
    verification workflow.
    """
    KIND = None

    name = models.CharField(max_length=200, db_index=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)

    # Legacy status
    approval_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
    )

    # Verification
    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        null=True,
        blank=True,
        db_index=True,
    )
    is_verified = models.BooleanField(default=False)
    verification_date = models.DateTimeField(null=True, blank=True)
    status_updated_at = models.DateTimeField(null=True, blank=True)
    status_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    last_reviewed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the last decision was made, kept across resets"
    )
    admin_notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    @property
    def has_verification(self):
        return self.verification_status is not None

    def verification_record(self):
        if not self.has_verification:
            return None
        return {
            'status': self.verification_status,
            'is_verified': self.is_verified,
            'verified_at': self.verification_date,
            'status_updated_at': self.status_updated_at,
            'last_reviewed_at': self.last_reviewed_at,
            'admin_notes': self.admin_notes,
        }

    def to_record(self):
        """Raw record in the shape the status classifier consumes."""
        record = {
            'id': str(self.pk),
            'kind': self.KIND,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'owner_name': self.owner.name if self.owner else None,
            'owner_email': self.owner.email if self.owner else None,
            'approval_status': self.approval_status,
            'created_at': self.created_at,
        }
        verification = self.verification_record()
        if verification is not None:
            record['verification'] = verification
        return record


class Vendor(BusinessEntity):
    KIND = EntityKind.VENDOR.value

    business_type = models.CharField(max_length=100, blank=True)

    class Meta(BusinessEntity.Meta):
        db_table = 'vendors'
        verbose_name = 'Vendor'
        verbose_name_plural = 'Vendors'


class Restaurant(BusinessEntity):
    KIND = EntityKind.RESTAURANT.value

    cuisine_type = models.CharField(max_length=100, blank=True)
    address = models.TextField(blank=True)

    class Meta(BusinessEntity.Meta):
        db_table = 'restaurants'
        verbose_name = 'Restaurant'
        verbose_name_plural = 'Restaurants'


class VerificationAuditLog(models.Model):
    """One row per verification transition."""

    class Action(models.TextChoices):
        APPROVED = 'APPROVED', 'Approved'
        REJECTED = 'REJECTED', 'Rejected'
        RESET = 'RESET', 'Reset to pending'

    kind = models.CharField(max_length=20, choices=EntityKind.choices, db_index=True)
    entity_id = models.CharField(max_length=64, db_index=True)
    entity_name = models.CharField(max_length=200, blank=True)
    action = models.CharField(max_length=20, choices=Action.choices)
    from_status = models.CharField(max_length=20, blank=True)
    to_status = models.CharField(max_length=20)
    reason = models.TextField(blank=True)
    bulk = models.BooleanField(default=False)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verification_actions',
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'verification_audit_logs'
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.kind} {self.entity_id}: {self.from_status} -> {self.to_status}"
