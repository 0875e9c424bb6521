"""
Listing and category bulk actions.

Both run through the shared BulkActionDispatcher; this module only supplies
the per-item resolvers that map a bulk action onto the moderation services.
"""
from typing import Any, Dict, Mapping, Optional

from django.core.exceptions import ValidationError

from apps.marketplace.services.category_service import CategoryService
from apps.marketplace.services.listing_service import ListingService
from apps.verification.constants import EntityKind
from apps.verification.services.bulk import (
    BulkAction,
    BulkActionDispatcher,
    BulkActionRequest,
    BulkActionResult,
    Resolver,
)


def listing_resolver(performed_by=None) -> Resolver:
    """Resolver for listing bulk actions."""

    def resolve(kind, listing_id, action, data: Dict[str, Any]):
        if action == BulkAction.UPDATE_STATUS:
            return ListingService.update_status(listing_id, data['status'])
        if action == BulkAction.TOGGLE_FEATURED:
            return ListingService.toggle_featured(listing_id)
        if action == BulkAction.FLAG_LISTINGS:
            return ListingService.flag(
                listing_id, data['flag_reason'], notes=data.get('reason', ''), flagged_by=performed_by
            )
        if action == BulkAction.UNFLAG_LISTINGS:
            return ListingService.unflag(listing_id)
        if action == BulkAction.DELETE_LISTINGS:
            return ListingService.delete(listing_id, data['reason'])
        raise ValidationError(f"'{action}' is not a listing action")

    return resolve


def category_resolver(performed_by=None) -> Resolver:
    """Resolver for category bulk actions."""

    def resolve(kind, category_id, action, data: Dict[str, Any]):
        if action == BulkAction.FLAG_CATEGORIES:
            return CategoryService.flag(category_id, data['reason'], flagged_by=performed_by)
        if action == BulkAction.UNFLAG_CATEGORIES:
            return CategoryService.unflag(category_id)
        if action == BulkAction.DELETE_CATEGORIES:
            return CategoryService.delete(category_id, data['reason'])
        raise ValidationError(f"'{action}' is not a category action")

    return resolve


def _build_request(payload: Mapping[str, Any], ids_key: str) -> BulkActionRequest:
    data = dict(payload.get('data') or {})
    # The console sends the reason either top-level or inside data
    reason = payload.get('reason') or data.pop('reason', '') or ''
    return BulkActionRequest(
        action=payload.get('action') or '',
        target_ids=tuple(payload.get(ids_key) or ()),
        data=data,
        reason=reason,
    )


def _require_kind(request: BulkActionRequest, kind: str):
    spec = request.spec
    if spec is not None and spec.kinds != (kind,):
        raise ValidationError({'action': f"'{request.action}' is not a {kind} bulk action"})


def dispatch_listing_bulk_action(payload: Mapping[str, Any], performed_by=None,
                                 resolver: Optional[Resolver] = None,
                                 dispatcher: Optional[BulkActionDispatcher] = None) -> BulkActionResult:
    """
    Run ``{action, listing_ids, data, reason}`` over every listing.

    Raises:
        ValidationError: Malformed request; nothing was dispatched
    """
    request = _build_request(payload, 'listing_ids')
    _require_kind(request, EntityKind.LISTING.value)
    dispatcher = dispatcher or BulkActionDispatcher()
    return dispatcher.dispatch(request, resolver or listing_resolver(performed_by))


def dispatch_category_bulk_action(payload: Mapping[str, Any], performed_by=None,
                                  resolver: Optional[Resolver] = None,
                                  dispatcher: Optional[BulkActionDispatcher] = None) -> BulkActionResult:
    """Run ``{action, category_ids, data, reason}`` over every category."""
    request = _build_request(payload, 'category_ids')
    _require_kind(request, EntityKind.CATEGORY.value)
    dispatcher = dispatcher or BulkActionDispatcher()
    return dispatcher.dispatch(request, resolver or category_resolver(performed_by))
