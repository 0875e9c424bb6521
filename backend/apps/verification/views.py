"""
Verification admin API views.
Approval queue, single-entity transitions, bulk actions and selection.
"""
import logging
from functools import partial
from django.core.exceptions import ValidationError
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample, OpenApiResponse
from drf_spectacular.types import OpenApiTypes
from common.models import AdminActionLog
from common.services.logging_service import LoggingService
from common.throttling import BulkActionThrottle, ReviewThrottle
from apps.verification.constants import VERIFICATION_KINDS
from apps.verification.exceptions import AggregationFailure, RemoteFailure
from apps.verification.models import VerificationAuditLog
from apps.verification.permissions import IsAdminOrSupport
from apps.verification.serializers import (
    ApproveSerializer,
    BulkVerificationSerializer,
    QueueQuerySerializer,
    ReasonSerializer,
    SelectionOperationSerializer,
    VerificationAuditLogSerializer,
)
from apps.verification.services.bulk import (
    ACTION_SPECS,
    BulkActionDispatcher,
    BulkActionRequest,
    verification_resolver,
)
from apps.verification.services.classifier import build_application
from apps.verification.services.mutations import (
    bulk_update_verification,
    get_entity_model,
    reset_verification,
    update_verification,
)
from apps.verification.services.queue import load_queue
from apps.verification.services.selection import SessionSelectionStore
from apps.verification.services.sources import fetch_restaurant_queue, fetch_vendor_queue
from apps.verification.services.state_machine import ApprovalAction, ApprovalStateMachine
from apps.verification.utils import error_response, get_client_ip

logger = logging.getLogger(__name__)

KIND_PARAMETER = OpenApiParameter(
    name='kind',
    type=OpenApiTypes.STR,
    location=OpenApiParameter.PATH,
    description='vendor or restaurant',
    enum=list(VERIFICATION_KINDS),
)
ID_PARAMETER = OpenApiParameter(
    name='entity_id',
    type=OpenApiTypes.STR,
    location=OpenApiParameter.PATH,
    description='ID of the vendor or restaurant',
)

ADMIN_ACTIONS = {
    ApprovalAction.APPROVE: AdminActionLog.Action.APPROVE_VERIFICATION,
    ApprovalAction.REJECT: AdminActionLog.Action.REJECT_VERIFICATION,
    ApprovalAction.RESET: AdminActionLog.Action.RESET_VERIFICATION,
}


# ==================== Approval Queue ====================

@extend_schema(
    tags=['Admin - Verification'],
    summary='Get the approval queue',
    description='''
    Returns vendors and restaurants as one classified queue.

    Each item carries its `kind`, `display_state` (verified, unverified,
    pending-review), `urgency` (normal, high, urgent) and `days_waiting`.
    Without `type` both sources are merged and sorted; with `type` the
    pagination is the one of that single source.
    ''',
    parameters=[
        OpenApiParameter('type', str, enum=['vendor', 'restaurant'], description='Narrow to one source'),
        OpenApiParameter('status', str, enum=['pending', 'approved', 'rejected']),
        OpenApiParameter('search', str, description='Name, email, phone or owner'),
        OpenApiParameter('page', int),
        OpenApiParameter('limit', int),
        OpenApiParameter('sort_by', str, enum=['created_at', 'name']),
        OpenApiParameter('sort_order', str, enum=['asc', 'desc']),
    ],
    responses={
        200: OpenApiResponse(
            description='Merged queue',
            examples=[
                OpenApiExample(
                    'Queue',
                    value={
                        'items': [{
                            'id': '12',
                            'kind': 'vendor',
                            'name': 'Fresh Farm Produce',
                            'created_at': '2024-02-10T09:00:00+00:00',
                            'display_state': 'pending-review',
                            'urgency': 'urgent',
                            'days_waiting': 9,
                            'is_resolved': False,
                        }],
                        'stats': {'total': 1, 'pending': 1, 'approved': 0, 'rejected': 0,
                                  'vendors': 1, 'restaurants': 0},
                        'pagination': {'page': 1, 'limit': 12, 'total': 1, 'pages': 1},
                    }
                )
            ]
        ),
        400: OpenApiResponse(description='Invalid filters'),
        503: OpenApiResponse(description='One of the queue sources failed'),
    }
)
@api_view(['GET'])
@permission_classes([IsAdminOrSupport])
def approval_queue(request):
    """Merged vendor/restaurant approval queue (admin only)."""
    serializer = QueueQuerySerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        queue = load_queue(
            serializer.to_queue_request(),
            fetch_vendor_queue,
            fetch_restaurant_queue,
        )
    except (ValidationError, AggregationFailure) as e:
        return error_response(e)

    return Response(queue.to_dict())


# ==================== Single Transitions ====================

def _load_application(kind, entity_id):
    """Current classified application, or None when it does not exist."""
    if kind not in VERIFICATION_KINDS:
        return None
    model = get_entity_model(kind)
    try:
        entity = model.objects.select_related('owner').get(pk=entity_id)
    except (model.DoesNotExist, ValueError):
        return None
    return build_application(entity.to_record(), kind=kind)


def _run_transition(request, kind, entity_id, action, text):
    application = _load_application(kind, entity_id)
    if application is None:
        return Response({'detail': f'{kind.capitalize()} not found'}, status=status.HTTP_404_NOT_FOUND)

    ip_address = get_client_ip(request)
    machine = ApprovalStateMachine(
        update_verification=partial(update_verification, performed_by=request.user, ip_address=ip_address),
        reset_verification=partial(reset_verification, performed_by=request.user, ip_address=ip_address),
    )

    try:
        result = machine.transition(application, action, text)
    except (ValidationError, RemoteFailure) as e:
        return error_response(e)

    LoggingService.log_admin_action(
        admin_user=request.user,
        action=ADMIN_ACTIONS[action],
        request=request,
        target_type=kind,
        target_id=entity_id,
        details={'reason': result.reason, 'from': application.display_state},
    )

    updated = _load_application(kind, entity_id)
    return Response({
        'message': f'{kind.capitalize()} {result.status}',
        'transition': result.to_dict(),
        'application': updated.to_dict() if updated else None,
    })


@extend_schema(
    tags=['Admin - Verification'],
    summary='Approve an application',
    description='''
    Approves a vendor or restaurant that is pending review.

    **Required:**
    - notes: shown to the applicant and kept in the audit trail

    Applications that are already verified or unverified must be reset first (409).
    ''',
    parameters=[KIND_PARAMETER, ID_PARAMETER],
    request=ApproveSerializer,
    examples=[
        OpenApiExample(
            'Approve',
            value={'notes': 'Business licence and tax documents verified'},
            request_only=True
        ),
    ],
    responses={
        200: OpenApiResponse(description='Application approved'),
        400: OpenApiResponse(
            description='Missing notes',
            examples=[OpenApiExample('No notes', value={'notes': ['This action requires non-empty notes']})]
        ),
        404: OpenApiResponse(description='Application not found'),
        409: OpenApiResponse(description='Application already resolved'),
    }
)
@api_view(['POST'])
@permission_classes([IsAdminOrSupport])
@throttle_classes([ReviewThrottle])
def approve_application(request, kind, entity_id):
    """Approve a pending vendor or restaurant (admin only)."""
    serializer = ApproveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _run_transition(request, kind, entity_id, ApprovalAction.APPROVE, serializer.validated_data['notes'])


@extend_schema(
    tags=['Admin - Verification'],
    summary='Reject an application',
    parameters=[KIND_PARAMETER, ID_PARAMETER],
    request=ReasonSerializer,
    examples=[
        OpenApiExample(
            'Reject',
            value={'reason': 'Food safety certificate has expired'},
            request_only=True
        ),
    ],
    responses={
        200: OpenApiResponse(description='Application rejected'),
        400: OpenApiResponse(description='Missing reason'),
        404: OpenApiResponse(description='Application not found'),
        409: OpenApiResponse(description='Application already resolved'),
    }
)
@api_view(['POST'])
@permission_classes([IsAdminOrSupport])
@throttle_classes([ReviewThrottle])
def reject_application(request, kind, entity_id):
    """Reject a pending vendor or restaurant with a reason (admin only)."""
    serializer = ReasonSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _run_transition(request, kind, entity_id, ApprovalAction.REJECT, serializer.validated_data['reason'])


@extend_schema(
    tags=['Admin - Verification'],
    summary='Reset an application to pending review',
    description='''
    Valid from any state. The previous decision stays visible in the
    application history; the application becomes eligible for approve/reject again.
    ''',
    parameters=[KIND_PARAMETER, ID_PARAMETER],
    request=ReasonSerializer,
    responses={
        200: OpenApiResponse(description='Application reset'),
        400: OpenApiResponse(description='Missing reason'),
        404: OpenApiResponse(description='Application not found'),
    }
)
@api_view(['POST'])
@permission_classes([IsAdminOrSupport])
@throttle_classes([ReviewThrottle])
def reset_application(request, kind, entity_id):
    """Send a vendor or restaurant back to pending review (admin only)."""
    serializer = ReasonSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _run_transition(request, kind, entity_id, ApprovalAction.RESET, serializer.validated_data['reason'])


@extend_schema(
    tags=['Admin - Verification'],
    summary='Verification history of an application',
    parameters=[KIND_PARAMETER, ID_PARAMETER],
    responses={200: VerificationAuditLogSerializer(many=True), 404: OpenApiResponse(description='Not found')}
)
@api_view(['GET'])
@permission_classes([IsAdminOrSupport])
def application_history(request, kind, entity_id):
    """Audit trail of one application (admin only)."""
    application = _load_application(kind, entity_id)
    if application is None:
        return Response({'detail': f'{kind.capitalize()} not found'}, status=status.HTTP_404_NOT_FOUND)

    logs = VerificationAuditLog.objects.filter(
        kind=kind, entity_id=application.id
    ).select_related('performed_by')
    return Response({
        'application': application.to_dict(),
        'history': VerificationAuditLogSerializer(logs, many=True).data,
    })


# ==================== Bulk Actions ====================

@extend_schema(
    tags=['Admin - Bulk Actions'],
    summary='Bulk approve, reject or reset applications',
    description='''
    Runs one verification action over a selection of vendors and restaurants.

    **Actions:** `approve_verification`, `reject_verification`, `reset_verification`
    (reason required for all three).

    With `entity_type`, only targets of that kind are processed and the others
    are reported under `skipped`. Failures of single items never abort the batch.
    ''',
    request=BulkVerificationSerializer,
    examples=[
        OpenApiExample(
            'Bulk approve',
            value={
                'action': 'approve_verification',
                'targets': [{'kind': 'vendor', 'id': '12'}, {'kind': 'restaurant', 'id': '4'}],
                'reason': 'Documents checked in batch review'
            },
            request_only=True
        ),
    ],
    responses={
        200: OpenApiResponse(
            description='Per-item outcome',
            examples=[
                OpenApiExample(
                    'Partial failure',
                    value={
                        'action': 'approve_verification',
                        'succeeded': ['12'],
                        'succeeded_targets': [{'kind': 'vendor', 'id': '12'}],
                        'failed': [{'id': '4', 'kind': 'restaurant', 'error': 'restaurant 4 is already verified'}],
                        'skipped': [],
                        'summary': {'requested': 2, 'succeeded': 1, 'failed': 1, 'skipped': 0},
                    }
                )
            ]
        ),
        400: OpenApiResponse(description='Malformed request, nothing was processed'),
    }
)
@api_view(['POST'])
@permission_classes([IsAdminOrSupport])
@throttle_classes([BulkActionThrottle])
def bulk_verification(request):
    """Bulk verification action over a mixed selection (admin only)."""
    serializer = BulkVerificationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    spec = ACTION_SPECS.get(data['action'])
    if spec is not None and not spec.is_verification:
        return Response(
            {'action': [f"'{data['action']}' is not a verification action"]},
            status=status.HTTP_400_BAD_REQUEST
        )

    bulk_request = BulkActionRequest(
        action=data['action'],
        target_ids=tuple((target['kind'], target['id']) for target in data['targets']),
        entity_type_filter=data['entity_type'],
        reason=data['reason'],
    )

    ip_address = get_client_ip(request)
    resolver = verification_resolver(
        partial(bulk_update_verification, performed_by=request.user, ip_address=ip_address),
        partial(reset_verification, performed_by=request.user, ip_address=ip_address, bulk=True),
    )

    try:
        result = BulkActionDispatcher().dispatch(bulk_request, resolver)
    except ValidationError as e:
        return error_response(e)

    payload = result.to_dict()
    LoggingService.log_admin_action(
        admin_user=request.user,
        action=AdminActionLog.Action.BULK_VERIFICATION,
        request=request,
        details={'action': result.action, **payload['summary']},
    )

    if result.all_succeeded:
        store = SessionSelectionStore(request.session)
        store.save('approvals', store.load('approvals').clear())

    return Response(payload)


# ==================== Selection ====================

@extend_schema(
    tags=['Admin - Bulk Actions'],
    summary='Read or change the bulk selection of a queue',
    description='''
    Each queue (`approvals`, `listings`, `categories`) keeps its own selection
    in the session.

    **Operations:** `toggle` (kind, id), `select_all` (items), `clear`.
    Pass the visible `items` to get the header checkbox state
    (checked, indeterminate, unchecked).
    ''',
    parameters=[
        OpenApiParameter('queue', str, OpenApiParameter.PATH, enum=['approvals', 'listings', 'categories']),
    ],
    request=SelectionOperationSerializer,
    examples=[
        OpenApiExample(
            'Toggle',
            value={'op': 'toggle', 'kind': 'vendor', 'id': '12'},
            request_only=True
        ),
    ],
    responses={200: OpenApiResponse(description='Current selection')}
)
@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrSupport])
def selection(request, queue):
    """Session-backed selection set of one queue (admin only)."""
    store = SessionSelectionStore(request.session)

    try:
        current = store.load(queue)
    except ValidationError as e:
        return Response({'detail': str(e.messages[0])}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(current.to_dict())

    serializer = SelectionOperationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    items = [(item['kind'], item['id']) for item in data['items']]

    try:
        if data['op'] == 'toggle':
            updated = current.toggle(data['kind'], data['id'])
        elif data['op'] == 'select_all':
            updated = current.select_all(items)
        else:
            updated = current.clear()
    except ValidationError as e:
        return error_response(e)

    store.save(queue, updated)

    response = updated.to_dict()
    if items:
        response['checkbox_state'] = updated.checkbox_state(items)
    return Response(response)
