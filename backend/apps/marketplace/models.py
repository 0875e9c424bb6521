"""
Marketplace models - Categories and Listings.
"""
import uuid
from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils.text import slugify
from apps.verification.constants import FlagReason, ListingStatus, CATEGORY_FLAG_REASON_MAX_LENGTH
from apps.verification.models import Vendor


class Category(models.Model):
    """
    Product category. Flagged categories are hidden from the storefront
    until an admin unflags them.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, unique=True, db_index=True)
    slug = models.SlugField(max_length=250, unique=True, db_index=True)
    description = models.TextField(blank=True)
    is_available = models.BooleanField(default=True, db_index=True)

    # Moderation
    is_flagged = models.BooleanField(default=False, db_index=True)
    flag_reason = models.CharField(max_length=CATEGORY_FLAG_REASON_MAX_LENGTH, blank=True)
    flagged_at = models.DateTimeField(null=True, blank=True)
    flagged_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        """Auto-generate slug from name."""
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)


class Listing(models.Model):
    """
    A product listed by a vendor.
    Categories cannot be deleted while listings still point at them.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name='listings'
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='listings'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )
    status = models.CharField(
        max_length=20,
        choices=ListingStatus.choices,
        default=ListingStatus.ACTIVE,
        db_index=True
    )
    is_featured = models.BooleanField(default=False, db_index=True)

    # Moderation
    is_flagged = models.BooleanField(default=False, db_index=True)
    flag_reason = models.CharField(max_length=30, choices=FlagReason.choices, blank=True)
    flag_notes = models.TextField(blank=True)
    flagged_at = models.DateTimeField(null=True, blank=True)
    flagged_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Listing'
        verbose_name_plural = 'Listings'

    def __str__(self):
        return f"{self.title} ({self.vendor.name})"
