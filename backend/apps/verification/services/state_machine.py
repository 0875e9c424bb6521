"""
Approval transition state machine.

Validates and executes one application's lifecycle transition:
pending-review -> approved | rejected, and back to pending-review via reset.
The machine never touches storage itself; it calls the injected mutation
callables and reports what they did. Nothing is assumed to have changed until
the mutation returns.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from django.core.exceptions import ValidationError
from django.db import models

from apps.verification.constants import DisplayState, VerificationStatus
from apps.verification.exceptions import InvalidTransition, RemoteFailure
from apps.verification.services.classifier import BusinessApplication

logger = logging.getLogger(__name__)


class ApprovalAction(models.TextChoices):
    APPROVE = 'approve', 'Approve'
    REJECT = 'reject', 'Reject'
    RESET = 'reset', 'Reset to pending'


UpdateVerification = Callable[[str, str, Dict[str, Any]], Any]
ResetVerification = Callable[[str, str, str], Any]


@dataclass(frozen=True)
class TransitionResult:
    kind: str
    entity_id: str
    action: str
    status: str
    reason: str
    response: Any = None

    def to_dict(self):
        return {
            'kind': self.kind,
            'id': self.entity_id,
            'action': self.action,
            'status': self.status,
            'reason': self.reason,
        }


def require_reason(reason, field_name='reason'):
    """Return the stripped reason or raise ValidationError when it is blank."""
    cleaned = str(reason or '').strip()
    if not cleaned:
        raise ValidationError({field_name: f'This action requires non-empty {field_name}'})
    return cleaned


class ApprovalStateMachine:
    """
    Single-entity approval transitions with strict rules.

    Resolved applications (verified/unverified) only accept ``reset``.
    """

    TRANSITIONS = {
        DisplayState.PENDING_REVIEW: [
            ApprovalAction.APPROVE,
            ApprovalAction.REJECT,
            ApprovalAction.RESET,
        ],
        DisplayState.VERIFIED: [ApprovalAction.RESET],
        DisplayState.UNVERIFIED: [ApprovalAction.RESET],
    }

    TARGET_STATUS = {
        ApprovalAction.APPROVE: VerificationStatus.APPROVED,
        ApprovalAction.REJECT: VerificationStatus.REJECTED,
        ApprovalAction.RESET: VerificationStatus.PENDING,
    }

    # Request field carrying the required text for each action
    REASON_FIELDS = {
        ApprovalAction.APPROVE: 'notes',
        ApprovalAction.REJECT: 'reason',
        ApprovalAction.RESET: 'reason',
    }

    def __init__(self, update_verification: UpdateVerification,
                 reset_verification: ResetVerification):
        self.update_verification = update_verification
        self.reset_verification = reset_verification

    @classmethod
    def can_transition(cls, display_state: str, action: str) -> bool:
        """Check if the action is allowed from the given display state."""
        return action in cls.TRANSITIONS.get(display_state, [])

    @classmethod
    def build_payload(cls, action: str, reason: str) -> Dict[str, str]:
        """Payload handed to the external mutation."""
        return {'status': str(cls.TARGET_STATUS[action]), 'reason': reason}

    def approve(self, application: BusinessApplication, notes: str) -> TransitionResult:
        return self.transition(application, ApprovalAction.APPROVE, notes)

    def reject(self, application: BusinessApplication, reason: str) -> TransitionResult:
        return self.transition(application, ApprovalAction.REJECT, reason)

    def reset(self, application: BusinessApplication, reason: str) -> TransitionResult:
        return self.transition(application, ApprovalAction.RESET, reason)

    def transition(self, application: BusinessApplication, action: str,
                   reason: Optional[str]) -> TransitionResult:
        """
        Validate and execute one transition.

        Args:
            application: Classified application the admin is acting on
            action: One of ApprovalAction
            reason: Notes (approve) or reason (reject/reset), shown to the applicant

        Returns:
            TransitionResult describing the confirmed change

        Raises:
            ValidationError: Unknown action or blank reason (no mutation call)
            InvalidTransition: Approve/reject on a resolved application
            RemoteFailure: The mutation itself failed
        """
        if action not in ApprovalAction.values:
            raise ValidationError({'action': f"Unknown approval action '{action}'"})

        reason = require_reason(reason, self.REASON_FIELDS[action])

        if not self.can_transition(application.display_state, action):
            raise InvalidTransition(
                f"Cannot {action} {application.kind} {application.id}: "
                f"application is already {application.display_state}",
                display_state=application.display_state,
                action=action,
            )

        payload = self.build_payload(action, reason)

        try:
            if action == ApprovalAction.RESET:
                response = self.reset_verification(application.kind, application.id, reason)
            else:
                response = self.update_verification(application.kind, application.id, payload)
        except Exception as e:
            logger.warning(
                f"{action} failed for {application.kind} {application.id}: {e}"
            )
            raise RemoteFailure(application.kind, application.id, e) from e

        logger.info(
            f"{application.kind} {application.id}: {application.display_state} -> "
            f"{payload['status']} ({action})"
        )
        return TransitionResult(
            kind=application.kind,
            entity_id=application.id,
            action=str(action),
            status=payload['status'],
            reason=reason,
            response=response,
        )
