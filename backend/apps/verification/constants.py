"""
Shared choices for the business verification workflow.
"""
from django.db import models


class EntityKind(models.TextChoices):
    VENDOR = 'vendor', 'Vendor'
    RESTAURANT = 'restaurant', 'Restaurant'
    LISTING = 'listing', 'Listing'
    CATEGORY = 'category', 'Category'


# Kinds that carry the verification lifecycle
VERIFICATION_KINDS = (EntityKind.VENDOR.value, EntityKind.RESTAURANT.value)


class VerificationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class DisplayState(models.TextChoices):
    VERIFIED = 'verified', 'Verified'
    UNVERIFIED = 'unverified', 'Unverified'
    PENDING_REVIEW = 'pending-review', 'Pending Review'


class Urgency(models.TextChoices):
    NORMAL = 'normal', 'Normal'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


URGENCY_RANK = {
    Urgency.NORMAL: 0,
    Urgency.HIGH: 1,
    Urgency.URGENT: 2,
}


# Option sets for the listing and category bulk actions

class ListingStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    OUT_OF_STOCK = 'out_of_stock', 'Out of Stock'
    DISCONTINUED = 'discontinued', 'Discontinued'


class FlagReason(models.TextChoices):
    INAPPROPRIATE_CONTENT = 'inappropriate_content', 'Inappropriate Content'
    MISLEADING_INFORMATION = 'misleading_information', 'Misleading Information'
    QUALITY_ISSUES = 'quality_issues', 'Quality Issues'
    PRICING_VIOLATION = 'pricing_violation', 'Pricing Violation'
    SPAM = 'spam', 'Spam'
    OTHER = 'other', 'Other'


CATEGORY_FLAG_REASON_MAX_LENGTH = 500
