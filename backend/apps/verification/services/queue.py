"""
Approval queue aggregation.

Merges the independently paginated vendor and restaurant queues into one
ordered, classified sequence. The merge is a pure function of its inputs:
filters travel in an explicit QueueRequest instead of ambient page state.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.verification.constants import EntityKind, VERIFICATION_KINDS, VerificationStatus
from apps.verification.exceptions import AggregationFailure
from apps.verification.services.classifier import BusinessApplication, build_application

logger = logging.getLogger(__name__)

SORT_FIELDS = ('created_at', 'name')
SORT_ORDERS = ('asc', 'desc')


@dataclass(frozen=True)
class QueueFilters:
    """Filter shape shared by both queue sources."""
    status: str = ''
    search: str = ''
    page: int = 1
    limit: int = 12
    sort_by: str = 'created_at'
    sort_order: str = 'desc'

    def validate(self):
        errors = {}
        if self.status and self.status not in VerificationStatus.values:
            errors['status'] = f"Unknown status '{self.status}'"
        if self.page < 1:
            errors['page'] = 'Page must be 1 or greater'
        max_limit = getattr(settings, 'APPROVAL_QUEUE_MAX_PAGE_SIZE', 100)
        if self.limit < 1 or self.limit > max_limit:
            errors['limit'] = f'Limit must be between 1 and {max_limit}'
        if self.sort_by not in SORT_FIELDS:
            errors['sort_by'] = f"Cannot sort by '{self.sort_by}'"
        if self.sort_order not in SORT_ORDERS:
            errors['sort_order'] = "Sort order must be 'asc' or 'desc'"
        if errors:
            raise ValidationError(errors)
        return self


@dataclass(frozen=True)
class QueueRequest:
    """
    Everything the aggregator needs to know about the current view.

    ``type`` narrows the queue to one source; an empty string includes both.
    """
    filters: QueueFilters = field(default_factory=QueueFilters)
    type: str = ''

    def validate(self):
        if self.type and self.type not in VERIFICATION_KINDS:
            raise ValidationError({'type': f"Unknown entity type '{self.type}'"})
        self.filters.validate()
        return self

    @property
    def kinds(self):
        if self.type:
            return (self.type,)
        return tuple(VERIFICATION_KINDS)

    def with_page(self, page):
        return replace(self, filters=replace(self.filters, page=page))


@dataclass
class PageResult:
    """One page fetched from a single source."""
    items: List[Mapping[str, Any]] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)
    pagination: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ApprovalQueue:
    items: List[BusinessApplication]
    stats: Dict[str, int]
    pagination: Dict[str, int]

    def to_dict(self):
        return {
            'items': [item.to_dict() for item in self.items],
            'stats': dict(self.stats),
            'pagination': dict(self.pagination),
        }


def combine_stats(pages: Mapping[str, Optional[PageResult]]) -> Dict[str, int]:
    """Sum every stat category across sources; missing counts are 0."""
    keys = []
    for page in pages.values():
        if page is None:
            continue
        for key in page.stats:
            if key not in keys:
                keys.append(key)

    combined = {
        key: sum(int((page.stats if page else {}).get(key) or 0) for page in pages.values())
        for key in keys
    }
    for kind in VERIFICATION_KINDS:
        page = pages.get(kind)
        combined[f'{kind}s'] = _source_total(page) if page is not None else 0
    return combined


def _source_total(page: PageResult) -> int:
    total = page.pagination.get('total')
    if total is None:
        total = page.stats.get('total', len(page.items))
    return int(total or 0)


def combine_pagination(request: QueueRequest,
                       pages: Mapping[str, Optional[PageResult]]) -> Dict[str, int]:
    """
    Per-source pagination when narrowed to one source, otherwise an aggregate
    with ``pages = ceil(total / limit)`` (0 pages for an empty queue).
    """
    if request.type:
        page = pages[request.type]
        pagination = dict(page.pagination)
        pagination.setdefault('page', request.filters.page)
        pagination.setdefault('limit', request.filters.limit)
        pagination.setdefault('total', _source_total(page))
        pagination.setdefault('pages', math.ceil(pagination['total'] / pagination['limit']))
        return pagination

    limit = request.filters.limit
    total = sum(_source_total(page) for page in pages.values() if page is not None)
    return {
        'page': request.filters.page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit),
    }


def _sort_key(sort_by: str, descending: bool):
    def key(entry):
        position, kind, application = entry
        if sort_by == 'name':
            value = application.name.casefold()
            if descending:
                # Invert each code point; the trailing 1 puts longer names first
                value = tuple(-ord(char) for char in value) + (1,)
            missing = False
        else:
            created = application.created_at
            missing = created is None
            value = created.timestamp() if created else 0.0
            if descending:
                value = -value
        return (missing, value, position, kind)
    return key


def merge_applications(request: QueueRequest,
                       pages: Mapping[str, Optional[PageResult]],
                       now: datetime) -> List[BusinessApplication]:
    """
    Classify and order the items of every included source.

    Ties are broken by the item's position within its source page, then by
    kind, so identical inputs always produce the same order.
    """
    entries = []
    for kind in request.kinds:
        page = pages[kind]
        for position, record in enumerate(page.items):
            entries.append((position, kind, build_application(record, kind=kind, now=now)))

    if len(request.kinds) > 1:
        descending = request.filters.sort_order == 'desc'
        entries.sort(key=_sort_key(request.filters.sort_by, descending))

    return [application for _, _, application in entries]


def aggregate(request: QueueRequest,
              vendor_page: Optional[PageResult],
              restaurant_page: Optional[PageResult],
              now: Optional[datetime] = None) -> ApprovalQueue:
    """
    Merge two fetched pages into a single ApprovalQueue.

    A source the request includes but that has no page is an aggregation
    failure: the queue is never rendered with one half silently missing.
    """
    if now is None:
        now = timezone.now()

    pages = {
        EntityKind.VENDOR.value: vendor_page,
        EntityKind.RESTAURANT.value: restaurant_page,
    }
    for kind in request.kinds:
        if pages[kind] is None:
            raise AggregationFailure(kind, 'no result')

    included = {kind: pages[kind] for kind in request.kinds}

    return ApprovalQueue(
        items=merge_applications(request, included, now),
        stats=combine_stats(included),
        pagination=combine_pagination(request, included),
    )


QueueFetcher = Callable[[QueueFilters], PageResult]


def load_queue(request: QueueRequest,
               fetch_vendor_queue: QueueFetcher,
               fetch_restaurant_queue: QueueFetcher,
               now: Optional[datetime] = None) -> ApprovalQueue:
    """
    Fetch every source the request includes and aggregate the results.

    Raises:
        ValidationError: If the request filters are invalid
        AggregationFailure: If any included source fetch fails
    """
    request.validate()

    fetchers = {
        EntityKind.VENDOR.value: fetch_vendor_queue,
        EntityKind.RESTAURANT.value: fetch_restaurant_queue,
    }
    pages = {EntityKind.VENDOR.value: None, EntityKind.RESTAURANT.value: None}

    for kind in request.kinds:
        try:
            pages[kind] = fetchers[kind](request.filters)
        except Exception as e:
            logger.error(f"Approval queue source '{kind}' failed: {e}")
            raise AggregationFailure(kind, e) from e

    return aggregate(
        request,
        pages[EntityKind.VENDOR.value],
        pages[EntityKind.RESTAURANT.value],
        now=now,
    )
