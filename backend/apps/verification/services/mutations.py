"""
ORM-backed verification mutations.

These are the default implementations of the mutation callables the state
machine and the bulk dispatcher are given. Each call locks the entity row,
re-checks the transition against the stored state and writes an audit row.
"""
import logging
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.verification.constants import EntityKind, VerificationStatus
from apps.verification.exceptions import InvalidTransition
from apps.verification.models import Restaurant, Vendor, VerificationAuditLog
from apps.verification.services.classifier import build_application

logger = logging.getLogger(__name__)

ENTITY_MODELS = {
    EntityKind.VENDOR.value: Vendor,
    EntityKind.RESTAURANT.value: Restaurant,
}

AUDIT_ACTIONS = {
    VerificationStatus.APPROVED: VerificationAuditLog.Action.APPROVED,
    VerificationStatus.REJECTED: VerificationAuditLog.Action.REJECTED,
}


def get_entity_model(kind):
    try:
        return ENTITY_MODELS[kind]
    except KeyError:
        raise ValidationError({'kind': f"Unknown entity type '{kind}'"})


def lock_entity(kind, entity_id):
    """
    Fetch and lock one entity row. Must run inside a transaction.

    Raises:
        Model.DoesNotExist: If no such entity exists (including malformed ids)
    """
    model = get_entity_model(kind)
    try:
        return model.objects.select_for_update().select_related('owner').get(pk=entity_id)
    except (ValueError, TypeError):
        raise model.DoesNotExist(f"{kind} {entity_id} does not exist")


@transaction.atomic
def update_verification(kind: str, entity_id: str, payload: Dict[str, Any],
                        performed_by=None, ip_address: Optional[str] = None,
                        bulk: bool = False):
    """
    Approve or reject one pending application.

    Args:
        kind: vendor or restaurant
        entity_id: Entity primary key
        payload: ``{'status': 'approved'|'rejected', 'reason': str}``
        performed_by: Admin user making the decision
        ip_address: Requesting IP for the audit row
        bulk: Whether the call is part of a bulk action

    Raises:
        ValidationError: Unsupported status
        InvalidTransition: The stored application is no longer pending review
    """
    status = payload.get('status')
    if status not in AUDIT_ACTIONS:
        raise ValidationError({'status': f"Cannot set verification status to '{status}'"})

    entity = lock_entity(kind, entity_id)

    # Re-check against the locked row; another admin may have decided already
    current = build_application(entity.to_record(), kind=kind)
    if current.is_resolved:
        raise InvalidTransition(
            f"{kind} {entity_id} is already {current.display_state}",
            display_state=current.display_state,
            action=status,
        )

    now = timezone.now()
    from_status = current.status.status

    entity.verification_status = status
    entity.is_verified = status == VerificationStatus.APPROVED
    entity.verification_date = now if entity.is_verified else None
    entity.status_updated_at = now
    entity.status_updated_by = performed_by
    entity.admin_notes = payload.get('reason') or ''
    entity.save(update_fields=[
        'verification_status',
        'is_verified',
        'verification_date',
        'status_updated_at',
        'status_updated_by',
        'admin_notes',
        'updated_at',
    ])

    VerificationAuditLog.objects.create(
        kind=kind,
        entity_id=str(entity.pk),
        entity_name=entity.name,
        action=AUDIT_ACTIONS[status],
        from_status=from_status,
        to_status=status,
        reason=entity.admin_notes,
        bulk=bulk,
        performed_by=performed_by,
        ip_address=ip_address,
    )

    logger.info(f"{kind} {entity.pk} {from_status} -> {status}{' (bulk)' if bulk else ''}")
    return entity


def bulk_update_verification(kind: str, entity_id: str, payload: Dict[str, Any],
                             performed_by=None, ip_address: Optional[str] = None):
    """Per-item mutation used by the bulk dispatcher."""
    return update_verification(
        kind, entity_id, payload,
        performed_by=performed_by,
        ip_address=ip_address,
        bulk=True,
    )


@transaction.atomic
def reset_verification(kind: str, entity_id: str, reason: str,
                       performed_by=None, ip_address: Optional[str] = None,
                       bulk: bool = False):
    """
    Send an application back to pending review from any state.

    The previous decision time moves to ``last_reviewed_at`` and the admin
    notes are kept, so the history stays displayable while the live
    classification becomes pending-review again.
    """
    entity = lock_entity(kind, entity_id)
    from_status = entity.verification_status or entity.approval_status

    entity.verification_status = VerificationStatus.PENDING
    entity.is_verified = False
    entity.verification_date = None
    if entity.status_updated_at is not None:
        entity.last_reviewed_at = entity.status_updated_at
    entity.status_updated_at = None
    entity.status_updated_by = performed_by
    entity.save(update_fields=[
        'verification_status',
        'is_verified',
        'verification_date',
        'last_reviewed_at',
        'status_updated_at',
        'status_updated_by',
        'updated_at',
    ])

    VerificationAuditLog.objects.create(
        kind=kind,
        entity_id=str(entity.pk),
        entity_name=entity.name,
        action=VerificationAuditLog.Action.RESET,
        from_status=from_status,
        to_status=VerificationStatus.PENDING,
        reason=reason,
        bulk=bulk,
        performed_by=performed_by,
        ip_address=ip_address,
    )

    logger.info(f"{kind} {entity.pk} reset to pending (was {from_status})")
    return entity
