"""
Category moderation service.
"""
import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from apps.marketplace.models import Category
from apps.verification.constants import CATEGORY_FLAG_REASON_MAX_LENGTH

logger = logging.getLogger(__name__)


class CategoryService:

    @staticmethod
    def lock(category_id) -> Category:
        try:
            return Category.objects.select_for_update().get(id=category_id)
        except (ValidationError, ValueError):
            raise Category.DoesNotExist(f"Category {category_id} does not exist")

    @staticmethod
    @transaction.atomic
    def flag(category_id, reason: str, flagged_by=None) -> Category:
        """Flag a category and take it off the storefront."""
        reason = (reason or '').strip()
        if not reason:
            raise ValidationError("A reason is required to flag a category")
        if len(reason) > CATEGORY_FLAG_REASON_MAX_LENGTH:
            raise ValidationError(
                f"Reason cannot exceed {CATEGORY_FLAG_REASON_MAX_LENGTH} characters"
            )

        category = CategoryService.lock(category_id)
        category.is_flagged = True
        category.is_available = False
        category.flag_reason = reason
        category.flagged_at = timezone.now()
        category.flagged_by = flagged_by
        category.save(update_fields=[
            'is_flagged', 'is_available', 'flag_reason', 'flagged_at', 'flagged_by', 'updated_at'
        ])

        logger.info(f"Category {category.name} flagged")
        return category

    @staticmethod
    @transaction.atomic
    def unflag(category_id) -> Category:
        category = CategoryService.lock(category_id)
        category.is_flagged = False
        category.is_available = True
        category.flag_reason = ''
        category.flagged_at = None
        category.flagged_by = None
        category.save(update_fields=[
            'is_flagged', 'is_available', 'flag_reason', 'flagged_at', 'flagged_by', 'updated_at'
        ])
        return category

    @staticmethod
    @transaction.atomic
    def delete(category_id, reason: str) -> str:
        """
        Delete a category that no listing uses any more.

        Raises:
            ValidationError: Listings still reference the category
        """
        category = CategoryService.lock(category_id)
        in_use = category.listings.count()
        if in_use:
            raise ValidationError(
                f"Category '{category.name}' is used by {in_use} listing(s) and cannot be deleted"
            )

        deleted_id = str(category.id)
        category.delete()

        logger.info(f"Category {deleted_id} deleted: {reason}")
        return deleted_id
