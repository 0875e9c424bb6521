"""
Helper utilities for the admin console views.
"""
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from rest_framework import status
from rest_framework.response import Response

from apps.verification.exceptions import AggregationFailure, InvalidTransition, RemoteFailure


def get_client_ip(request):
    """
    Get the client's IP address from the request.
    Handles proxy headers (X-Forwarded-For) correctly.

    Args:
        request: Django request object

    Returns:
        str: Client IP address
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        # Get the first IP in the list (client IP)
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


def validation_errors(exc: ValidationError):
    """Django ValidationError -> serializer-style error dict."""
    if hasattr(exc, 'error_dict'):
        return exc.message_dict
    return {'detail': exc.messages[0] if len(exc.messages) == 1 else exc.messages}


def error_response(exc: Exception) -> Response:
    """
    Map a workflow error onto an HTTP response.

    ValidationError -> 400, InvalidTransition -> 409, RemoteFailure -> 404/409/502
    depending on its cause, AggregationFailure -> 503.
    """
    if isinstance(exc, InvalidTransition):
        return Response(
            {'detail': exc.messages[0], 'display_state': exc.display_state},
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, ValidationError):
        return Response(validation_errors(exc), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, RemoteFailure):
        cause = exc.error
        if isinstance(cause, ObjectDoesNotExist):
            return Response(
                {'detail': f"{exc.kind.capitalize()} not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        if isinstance(cause, InvalidTransition):
            return Response(
                {'detail': cause.messages[0], 'display_state': cause.display_state},
                status=status.HTTP_409_CONFLICT,
            )
        if isinstance(cause, ValidationError):
            return Response(validation_errors(cause), status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': str(exc)}, status=status.HTTP_502_BAD_GATEWAY)

    if isinstance(exc, AggregationFailure):
        return Response(
            {'detail': str(exc), 'source': exc.source},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    raise exc
