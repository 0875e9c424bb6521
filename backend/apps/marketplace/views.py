"""
Marketplace admin API views.
Listing and category moderation for the admin console.
"""
import logging
from django.core.exceptions import ValidationError
from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample, OpenApiResponse
from common.models import AdminActionLog
from common.services.logging_service import LoggingService
from common.throttling import BulkActionThrottle
from apps.marketplace.models import Category, Listing
from apps.marketplace.serializers import (
    BulkActionResultSerializer,
    CategoryBulkActionSerializer,
    CategorySerializer,
    ListingBulkActionSerializer,
    ListingSerializer,
)
from apps.marketplace.services.bulk_actions import (
    dispatch_category_bulk_action,
    dispatch_listing_bulk_action,
)
from apps.verification.permissions import IsAdminOrSupport
from apps.verification.utils import error_response

logger = logging.getLogger(__name__)


def _page_params(request):
    try:
        page = max(int(request.query_params.get('page', 1)), 1)
        limit = min(max(int(request.query_params.get('limit', 20)), 1), 100)
    except ValueError:
        raise ValidationError({'page': 'page and limit must be integers'})
    return page, limit


@extend_schema(
    tags=['Admin - Marketplace'],
    summary='List listings for moderation',
    parameters=[
        OpenApiParameter('status', str, description='active, inactive, out_of_stock or discontinued'),
        OpenApiParameter('flagged', bool, description='Only flagged (true) or unflagged (false) listings'),
        OpenApiParameter('search', str, description='Title or vendor name'),
        OpenApiParameter('page', int),
        OpenApiParameter('limit', int),
    ],
    responses={200: ListingSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAdminOrSupport])
def list_listings(request):
    """List listings with moderation state (admin only)."""
    try:
        page, limit = _page_params(request)
    except ValidationError as e:
        return error_response(e)

    listings = Listing.objects.select_related('vendor', 'category')
    if request.query_params.get('status'):
        listings = listings.filter(status=request.query_params['status'])
    if request.query_params.get('flagged') in ('true', 'false'):
        listings = listings.filter(is_flagged=request.query_params['flagged'] == 'true')
    search = request.query_params.get('search', '').strip()
    if search:
        listings = listings.filter(Q(title__icontains=search) | Q(vendor__name__icontains=search))

    total = listings.count()
    offset = (page - 1) * limit
    serializer = ListingSerializer(listings[offset:offset + limit], many=True)
    return Response({
        'items': serializer.data,
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'pages': (total + limit - 1) // limit,
        },
    })


@extend_schema(
    tags=['Admin - Marketplace'],
    summary='List categories for moderation',
    responses={200: CategorySerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAdminOrSupport])
def list_categories(request):
    """List every category with its listing count (admin only)."""
    categories = Category.objects.prefetch_related('listings')
    if request.query_params.get('flagged') in ('true', 'false'):
        categories = categories.filter(is_flagged=request.query_params['flagged'] == 'true')
    serializer = CategorySerializer(categories, many=True)
    return Response({'items': serializer.data})


@extend_schema(
    tags=['Admin - Marketplace'],
    summary='Run a bulk action over listings',
    description='''
    Applies one action to every selected listing.

    **Actions:**
    - `update_status` (data.status: active, inactive, out_of_stock, discontinued)
    - `toggle_featured`
    - `flag_listings` (data.flag_reason and reason required)
    - `unflag_listings`
    - `delete_listings` (reason required)

    The request is validated as a whole first; after that each listing is
    processed independently and failures are reported per item.
    ''',
    request=ListingBulkActionSerializer,
    examples=[
        OpenApiExample(
            'Flag listings',
            value={
                'action': 'flag_listings',
                'listing_ids': ['0f8fad5b-d9cb-469f-a165-70867728950e'],
                'data': {'flag_reason': 'misleading_information'},
                'reason': 'Product photos do not match the description'
            },
            request_only=True
        ),
    ],
    responses={
        200: BulkActionResultSerializer,
        400: OpenApiResponse(description='Malformed request, nothing was processed'),
        403: OpenApiResponse(description='Permission denied'),
    }
)
@api_view(['POST'])
@permission_classes([IsAdminOrSupport])
@throttle_classes([BulkActionThrottle])
def listing_bulk_action(request):
    """Run a bulk action over listings (admin only)."""
    serializer = ListingBulkActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = dispatch_listing_bulk_action(serializer.validated_data, performed_by=request.user)
    except ValidationError as e:
        return error_response(e)

    LoggingService.log_admin_action(
        admin_user=request.user,
        action=AdminActionLog.Action.BULK_LISTING_ACTION,
        request=request,
        target_type='listing',
        details=result.to_dict()['summary'] | {'action': result.action},
    )
    return Response(result.to_dict())


@extend_schema(
    tags=['Admin - Marketplace'],
    summary='Run a bulk action over categories',
    description='''
    **Actions:**
    - `flag_categories` (reason required, at most 500 characters)
    - `unflag_categories`
    - `delete_categories` (reason required; categories still used by listings are refused)
    ''',
    request=CategoryBulkActionSerializer,
    responses={
        200: BulkActionResultSerializer,
        400: OpenApiResponse(description='Malformed request, nothing was processed'),
        403: OpenApiResponse(description='Permission denied'),
    }
)
@api_view(['POST'])
@permission_classes([IsAdminOrSupport])
@throttle_classes([BulkActionThrottle])
def category_bulk_action(request):
    """Run a bulk action over categories (admin only)."""
    serializer = CategoryBulkActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = dispatch_category_bulk_action(serializer.validated_data, performed_by=request.user)
    except ValidationError as e:
        return error_response(e)

    LoggingService.log_admin_action(
        admin_user=request.user,
        action=AdminActionLog.Action.BULK_CATEGORY_ACTION,
        request=request,
        target_type='category',
        details=result.to_dict()['summary'] | {'action': result.action},
    )
    return Response(result.to_dict())
