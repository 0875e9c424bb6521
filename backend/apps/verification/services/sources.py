"""
ORM-backed queue sources for the approval queue.
"""
from django.db.models import Count, Q
from django.db.models.functions import Coalesce, Lower

from apps.verification.constants import VerificationStatus
from apps.verification.models import Restaurant, Vendor
from apps.verification.services.queue import PageResult, QueueFilters


def _base_queryset(model, filters: QueueFilters):
    queryset = model.objects.select_related('owner').annotate(
        effective_status=Coalesce('verification_status', 'approval_status'),
    )
    search = (filters.search or '').strip()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search)
            | Q(email__icontains=search)
            | Q(phone__icontains=search)
            | Q(owner__email__icontains=search)
            | Q(owner__name__icontains=search)
        )
    return queryset


def _stats(queryset):
    counts = queryset.aggregate(
        total=Count('pk'),
        **{
            status: Count('pk', filter=Q(effective_status=status))
            for status in VerificationStatus.values
        }
    )
    return {key: value or 0 for key, value in counts.items()}


def fetch_queue(model, filters: QueueFilters) -> PageResult:
    """
    One page of ``model`` records matching the filters.

    Stats cover every record matching the search, regardless of the status
    filter, so the console can show per-status totals next to the list.
    """
    queryset = _base_queryset(model, filters)
    stats = _stats(queryset)

    if filters.status:
        queryset = queryset.filter(effective_status=filters.status)

    if filters.sort_by == 'name':
        order = Lower('name')
        order = order.desc() if filters.sort_order == 'desc' else order.asc()
    else:
        order = '-created_at' if filters.sort_order == 'desc' else 'created_at'
    tiebreak = '-pk' if filters.sort_order == 'desc' else 'pk'
    queryset = queryset.order_by(order, tiebreak)

    total = queryset.count()
    offset = (filters.page - 1) * filters.limit
    entities = queryset[offset:offset + filters.limit]

    return PageResult(
        items=[entity.to_record() for entity in entities],
        stats=stats,
        pagination={
            'page': filters.page,
            'limit': filters.limit,
            'total': total,
            'pages': (total + filters.limit - 1) // filters.limit,
        },
    )


def fetch_vendor_queue(filters: QueueFilters) -> PageResult:
    return fetch_queue(Vendor, filters)


def fetch_restaurant_queue(filters: QueueFilters) -> PageResult:
    return fetch_queue(Restaurant, filters)
