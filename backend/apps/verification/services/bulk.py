"""
Bulk action dispatcher.

Applies one action, with one shared reason and payload, to many selected
entities. The whole request is validated before anything is dispatched;
after that every item is dispatched on its own and a failure is recorded
against that item only.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from apps.verification.constants import (
    CATEGORY_FLAG_REASON_MAX_LENGTH,
    EntityKind,
    FlagReason,
    ListingStatus,
    VERIFICATION_KINDS,
    VerificationStatus,
)

logger = logging.getLogger(__name__)


class BulkAction(models.TextChoices):
    APPROVE_VERIFICATION = 'approve_verification', 'Approve verification'
    REJECT_VERIFICATION = 'reject_verification', 'Reject verification'
    RESET_VERIFICATION = 'reset_verification', 'Reset verification'
    UPDATE_STATUS = 'update_status', 'Update status'
    TOGGLE_FEATURED = 'toggle_featured', 'Toggle featured'
    FLAG_LISTINGS = 'flag_listings', 'Flag listings'
    UNFLAG_LISTINGS = 'unflag_listings', 'Unflag listings'
    DELETE_LISTINGS = 'delete_listings', 'Delete listings'
    FLAG_CATEGORIES = 'flag_categories', 'Flag categories'
    UNFLAG_CATEGORIES = 'unflag_categories', 'Unflag categories'
    DELETE_CATEGORIES = 'delete_categories', 'Delete categories'


@dataclass(frozen=True)
class ActionSpec:
    """Validation rules for one bulk action."""
    kinds: Tuple[str, ...]
    reason_required: bool
    # data field -> allowed values
    required_data: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    reason_max_length: Optional[int] = None

    @property
    def is_verification(self):
        return self.kinds == tuple(VERIFICATION_KINDS)


LISTING = (EntityKind.LISTING.value,)
CATEGORY = (EntityKind.CATEGORY.value,)

ACTION_SPECS = {
    BulkAction.APPROVE_VERIFICATION: ActionSpec(tuple(VERIFICATION_KINDS), True),
    BulkAction.REJECT_VERIFICATION: ActionSpec(tuple(VERIFICATION_KINDS), True),
    BulkAction.RESET_VERIFICATION: ActionSpec(tuple(VERIFICATION_KINDS), True),
    BulkAction.UPDATE_STATUS: ActionSpec(
        LISTING, False, required_data={'status': tuple(ListingStatus.values)},
    ),
    BulkAction.TOGGLE_FEATURED: ActionSpec(LISTING, False),
    BulkAction.FLAG_LISTINGS: ActionSpec(
        LISTING, True, required_data={'flag_reason': tuple(FlagReason.values)},
    ),
    BulkAction.UNFLAG_LISTINGS: ActionSpec(LISTING, False),
    BulkAction.DELETE_LISTINGS: ActionSpec(LISTING, True),
    BulkAction.FLAG_CATEGORIES: ActionSpec(
        CATEGORY, True, reason_max_length=CATEGORY_FLAG_REASON_MAX_LENGTH,
    ),
    BulkAction.UNFLAG_CATEGORIES: ActionSpec(CATEGORY, False),
    BulkAction.DELETE_CATEGORIES: ActionSpec(CATEGORY, True),
}

VERIFICATION_STATUS_FOR = {
    BulkAction.APPROVE_VERIFICATION: VerificationStatus.APPROVED,
    BulkAction.REJECT_VERIFICATION: VerificationStatus.REJECTED,
}


@dataclass(frozen=True)
class BulkActionRequest:
    """
    One bulk action over many targets.

    ``target_ids`` holds plain ids for listing/category actions, and
    ``(kind, id)`` pairs (or ``{'kind', 'id'}`` mappings) for verification
    actions, whose selections may mix vendors and restaurants. Plain ids are
    accepted for verification actions only when ``entity_type_filter`` names
    their kind.
    """
    action: str
    target_ids: Tuple[Any, ...] = ()
    entity_type_filter: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    reason: str = ''

    @property
    def spec(self) -> Optional[ActionSpec]:
        return ACTION_SPECS.get(self.action)


@dataclass
class BulkActionResult:
    """Per-item outcomes, in dispatch order."""
    action: str
    succeeded: List[str] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[Dict[str, str]] = field(default_factory=list)
    succeeded_targets: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def all_succeeded(self):
        return not self.failed and bool(self.succeeded)

    def to_dict(self):
        return {
            'action': self.action,
            'succeeded': list(self.succeeded),
            'succeeded_targets': [
                {'kind': kind, 'id': entity_id} for kind, entity_id in self.succeeded_targets
            ],
            'failed': [
                {'id': item['id'], 'kind': item['kind'], 'error': str(item['error'])}
                for item in self.failed
            ],
            'skipped': list(self.skipped),
            'summary': {
                'requested': len(self.succeeded) + len(self.failed) + len(self.skipped),
                'succeeded': len(self.succeeded),
                'failed': len(self.failed),
                'skipped': len(self.skipped),
            },
        }


Resolver = Callable[[str, str, str, Dict[str, Any]], Any]


def _target_pair(target, spec: ActionSpec, entity_type_filter: Optional[str]):
    if isinstance(target, dict):
        return str(target.get('kind') or ''), str(target.get('id'))
    if isinstance(target, (tuple, list)) and len(target) == 2:
        return str(target[0]), str(target[1])
    if len(spec.kinds) == 1:
        return spec.kinds[0], str(target)
    if entity_type_filter:
        return entity_type_filter, str(target)
    return '', str(target)


class BulkActionDispatcher:
    """
    Validates a BulkActionRequest and runs it through a resolver.

    The resolver is called once per dispatched target as
    ``resolver(kind, id, action, data)`` where ``data`` is the request data
    plus the shared ``reason``. Anything it raises is recorded as that
    item's failure.
    """

    def __init__(self, max_targets: Optional[int] = None):
        if max_targets is None:
            max_targets = getattr(settings, 'BULK_ACTION_MAX_TARGETS', 100)
        self.max_targets = max_targets

    def validate(self, request: BulkActionRequest) -> List[Tuple[str, str]]:
        """
        Check the whole request before any dispatch.

        Returns:
            The (kind, id) pairs of every target, in request order

        Raises:
            ValidationError: With every problem found, keyed by field
        """
        errors = {}
        spec = request.spec

        if not request.action:
            raise ValidationError({'action': 'An action is required'})
        if spec is None:
            raise ValidationError({'action': f"Unknown bulk action '{request.action}'"})

        targets = list(request.target_ids or ())
        if not targets:
            errors['target_ids'] = 'Select at least one item'
        elif len(targets) > self.max_targets:
            errors['target_ids'] = f'Cannot process more than {self.max_targets} items at once'

        if request.entity_type_filter and request.entity_type_filter not in spec.kinds:
            errors['entity_type_filter'] = (
                f"'{request.entity_type_filter}' is not valid for {request.action}"
            )

        reason = str(request.reason or '').strip()
        if spec.reason_required and not reason:
            errors['reason'] = 'A reason is required for this action'
        elif spec.reason_max_length and len(reason) > spec.reason_max_length:
            errors['reason'] = f'Reason cannot exceed {spec.reason_max_length} characters'

        data = request.data or {}
        for name, allowed in spec.required_data.items():
            value = data.get(name)
            if not value:
                errors[name] = f'{name} is required for {request.action}'
            elif value not in allowed:
                errors[name] = f"'{value}' is not a valid {name}"

        pairs = [_target_pair(target, spec, request.entity_type_filter) for target in targets]
        bad_kinds = sorted({kind or '(missing)' for kind, _ in pairs if kind not in spec.kinds})
        if bad_kinds and 'target_ids' not in errors:
            errors['target_ids'] = (
                f"Targets of kind {', '.join(bad_kinds)} cannot receive {request.action}"
            )

        if errors:
            raise ValidationError(errors)
        return pairs

    def dispatch(self, request: BulkActionRequest, resolver: Resolver) -> BulkActionResult:
        """
        Run the action over every target.

        Never raises for per-item failures; only a malformed request raises
        (ValidationError, before any resolver call).
        """
        pairs = self.validate(request)
        payload = dict(request.data or {})
        payload['reason'] = str(request.reason or '').strip()

        result = BulkActionResult(action=str(request.action))
        for kind, entity_id in pairs:
            if request.entity_type_filter and kind != request.entity_type_filter:
                result.skipped.append({
                    'id': entity_id,
                    'kind': kind,
                    'reason': f'Excluded by entity type filter {request.entity_type_filter}',
                })
                continue

            try:
                resolver(kind, entity_id, str(request.action), payload)
            except Exception as e:
                logger.warning(f"Bulk {request.action} failed for {kind} {entity_id}: {e}")
                result.failed.append({'id': entity_id, 'kind': kind, 'error': e})
                continue

            result.succeeded.append(entity_id)
            result.succeeded_targets.append((kind, entity_id))

        logger.info(
            f"Bulk {request.action}: {len(result.succeeded)} succeeded, "
            f"{len(result.failed)} failed, {len(result.skipped)} skipped"
        )
        return result


def verification_resolver(bulk_update_verification, reset_verification) -> Resolver:
    """Route verification bulk actions to the verification mutations."""

    def resolve(kind, entity_id, action, data):
        if action == BulkAction.RESET_VERIFICATION:
            return reset_verification(kind, entity_id, data['reason'])
        status = VERIFICATION_STATUS_FOR.get(action)
        if status is None:
            raise ValidationError(f"'{action}' is not a verification action")
        return bulk_update_verification(
            kind, entity_id, {'status': str(status), 'reason': data['reason']}
        )

    return resolve
