"""
Errors raised by the verification workflow services.

Local validation problems use Django's ValidationError directly so views can
handle them the same way as serializer errors.
"""
from django.core.exceptions import ValidationError


class InvalidTransition(ValidationError):
    """Approve/reject attempted on an application that is already resolved."""

    def __init__(self, message, display_state=None, action=None):
        super().__init__(message, code='invalid_transition')
        self.display_state = display_state
        self.action = action


class RemoteFailure(Exception):
    """
    The external mutation rejected a transition.

    The original exception is kept on ``error`` (and as ``__cause__`` when
    raised with ``from``) so callers can report it verbatim.
    """

    def __init__(self, kind, entity_id, error):
        self.kind = kind
        self.entity_id = entity_id
        self.error = error
        super().__init__(f"{kind} {entity_id}: {error}")


class AggregationFailure(Exception):
    """One of the paginated queue sources failed; the queue is not rendered."""

    def __init__(self, source, error=None):
        self.source = source
        self.error = error
        message = f"Failed to load {source} queue"
        if error is not None:
            message = f"{message}: {error}"
        super().__init__(message)
