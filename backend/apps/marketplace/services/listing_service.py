"""
Listing moderation service.
Per-item mutations used by the listing bulk actions.
"""
import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from apps.marketplace.models import Listing
from apps.verification.constants import FlagReason, ListingStatus

logger = logging.getLogger(__name__)


class ListingService:
    """
    Moderation actions on a single listing.
    Every method locks the row it changes.
    """

    @staticmethod
    def lock(listing_id) -> Listing:
        """
        Fetch and lock one listing. Must run inside a transaction.

        Raises:
            Listing.DoesNotExist: Unknown or malformed id
        """
        try:
            return Listing.objects.select_for_update().get(id=listing_id)
        except (ValidationError, ValueError):
            raise Listing.DoesNotExist(f"Listing {listing_id} does not exist")

    @staticmethod
    @transaction.atomic
    def update_status(listing_id, status: str) -> Listing:
        if status not in ListingStatus.values:
            raise ValidationError(f"'{status}' is not a valid listing status")

        listing = ListingService.lock(listing_id)
        old_status = listing.status
        listing.status = status
        listing.save(update_fields=['status', 'updated_at'])

        logger.info(f"Listing {listing.id} status {old_status} -> {status}")
        return listing

    @staticmethod
    @transaction.atomic
    def toggle_featured(listing_id) -> Listing:
        listing = ListingService.lock(listing_id)
        listing.is_featured = not listing.is_featured
        listing.save(update_fields=['is_featured', 'updated_at'])
        return listing

    @staticmethod
    @transaction.atomic
    def flag(listing_id, flag_reason: str, notes: str = '', flagged_by=None) -> Listing:
        """
        Flag a listing for review.

        Args:
            listing_id: Listing to flag
            flag_reason: One of FlagReason
            notes: Admin explanation
            flagged_by: Admin user
        """
        if flag_reason not in FlagReason.values:
            raise ValidationError(f"'{flag_reason}' is not a valid flag reason")

        listing = ListingService.lock(listing_id)
        listing.is_flagged = True
        listing.flag_reason = flag_reason
        listing.flag_notes = notes or ''
        listing.flagged_at = timezone.now()
        listing.flagged_by = flagged_by
        listing.save(update_fields=[
            'is_flagged', 'flag_reason', 'flag_notes', 'flagged_at', 'flagged_by', 'updated_at'
        ])

        logger.info(f"Listing {listing.id} flagged: {flag_reason}")
        return listing

    @staticmethod
    @transaction.atomic
    def unflag(listing_id) -> Listing:
        listing = ListingService.lock(listing_id)
        listing.is_flagged = False
        listing.flag_reason = ''
        listing.flag_notes = ''
        listing.flagged_at = None
        listing.flagged_by = None
        listing.save(update_fields=[
            'is_flagged', 'flag_reason', 'flag_notes', 'flagged_at', 'flagged_by', 'updated_at'
        ])
        return listing

    @staticmethod
    @transaction.atomic
    def delete(listing_id, reason: str) -> str:
        listing = ListingService.lock(listing_id)
        deleted_id = str(listing.id)
        listing.delete()

        logger.info(f"Listing {deleted_id} deleted: {reason}")
        return deleted_id
