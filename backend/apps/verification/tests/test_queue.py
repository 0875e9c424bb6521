"""
Tests for the approval queue aggregation.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase
from apps.verification.exceptions import AggregationFailure
from apps.verification.services.queue import (
    PageResult,
    QueueFilters,
    QueueRequest,
    aggregate,
    load_queue,
)
from apps.verification.tests.base import make_record

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


def page(records, stats=None, total=None, limit=12):
    total = len(records) if total is None else total
    return PageResult(
        items=records,
        stats=stats or {'total': total, 'pending': total, 'approved': 0, 'rejected': 0},
        pagination={'page': 1, 'limit': limit, 'total': total, 'pages': -(-total // limit)},
    )


class AggregateTestCase(SimpleTestCase):
    """Merging the vendor and restaurant pages."""

    def setUp(self):
        self.vendors = page([
            make_record('v1', 'vendor', 'Alpha Farms', days_old=1, now=NOW),
            make_record('v2', 'vendor', 'Delta Dairy', days_old=5, now=NOW),
            make_record('v3', 'vendor', 'beta bakery', days_old=9, now=NOW),
        ])
        self.restaurants = page([
            make_record('r1', 'restaurant', 'Cairo Grill', days_old=2, now=NOW),
            make_record('r2', 'restaurant', 'Eden Cafe', days_old=7, now=NOW),
        ])

    def test_two_empty_sources(self):
        queue = aggregate(QueueRequest(), page([]), page([]), now=NOW)

        self.assertEqual(queue.items, [])
        self.assertEqual(queue.pagination['total'], 0)
        self.assertEqual(queue.pagination['pages'], 0)
        self.assertEqual(queue.stats['vendors'], 0)
        self.assertEqual(queue.stats['restaurants'], 0)

    def test_merge_descending_by_created_at(self):
        request = QueueRequest(filters=QueueFilters(sort_order='desc'))
        queue = aggregate(request, self.vendors, self.restaurants, now=NOW)

        self.assertEqual(len(queue.items), 5)
        created = [item.created_at for item in queue.items]
        for newer, older in zip(created, created[1:]):
            self.assertGreaterEqual(newer, older)
        self.assertEqual([item.id for item in queue.items], ['v1', 'r1', 'v2', 'r2', 'v3'])

    def test_merge_ascending_by_created_at(self):
        request = QueueRequest(filters=QueueFilters(sort_order='asc'))
        queue = aggregate(request, self.vendors, self.restaurants, now=NOW)

        self.assertEqual([item.id for item in queue.items], ['v3', 'r2', 'v2', 'r1', 'v1'])

    def test_merge_by_name_ignores_case(self):
        request = QueueRequest(filters=QueueFilters(sort_by='name', sort_order='asc'))
        queue = aggregate(request, self.vendors, self.restaurants, now=NOW)

        self.assertEqual(
            [item.name for item in queue.items],
            ['Alpha Farms', 'beta bakery', 'Cairo Grill', 'Delta Dairy', 'Eden Cafe']
        )

    def test_merge_by_name_descending(self):
        vendors = page([
            make_record('v1', 'vendor', 'Cafe', now=NOW),
            make_record('v2', 'vendor', 'Cafe Roma', now=NOW),
        ])
        restaurants = page([make_record('r1', 'restaurant', 'Bistro', now=NOW)])
        request = QueueRequest(filters=QueueFilters(sort_by='name', sort_order='desc'))
        queue = aggregate(request, vendors, restaurants, now=NOW)

        self.assertEqual([item.name for item in queue.items], ['Cafe Roma', 'Cafe', 'Bistro'])

    def test_ties_broken_by_position_then_kind(self):
        vendors = page([
            make_record('v1', 'vendor', 'Same', now=NOW),
            make_record('v2', 'vendor', 'Same', now=NOW),
        ])
        restaurants = page([
            make_record('r1', 'restaurant', 'Same', now=NOW),
        ])
        request = QueueRequest(filters=QueueFilters(sort_order='desc'))

        first = aggregate(request, vendors, restaurants, now=NOW)
        second = aggregate(request, vendors, restaurants, now=NOW)

        self.assertEqual([item.key for item in first.items], [
            ('restaurant', 'r1'), ('vendor', 'v1'), ('vendor', 'v2')
        ])
        self.assertEqual(first.items, second.items)

    def test_missing_created_at_sorts_last(self):
        undated = make_record('v9', 'vendor', 'Undated', now=NOW)
        undated['created_at'] = None
        vendors = page([undated, make_record('v1', 'vendor', 'Dated', days_old=3, now=NOW)])

        for order in ('asc', 'desc'):
            with self.subTest(order=order):
                request = QueueRequest(filters=QueueFilters(sort_order=order))
                queue = aggregate(request, vendors, page([]), now=NOW)
                self.assertEqual(queue.items[-1].id, 'v9')

    def test_items_are_classified(self):
        queue = aggregate(QueueRequest(), self.vendors, self.restaurants, now=NOW)
        by_id = {item.id: item for item in queue.items}

        self.assertEqual(by_id['v3'].classification.urgency, 'urgent')
        self.assertEqual(by_id['v2'].classification.urgency, 'high')
        self.assertEqual(by_id['r2'].classification.urgency, 'high')
        self.assertEqual(by_id['v1'].classification.urgency, 'normal')

    def test_stats_are_summed(self):
        vendors = page([], stats={'total': 10, 'pending': 6, 'approved': 3, 'rejected': 1}, total=10)
        restaurants = page([], stats={'total': 4, 'pending': 1, 'approved': 3}, total=4)
        queue = aggregate(QueueRequest(), vendors, restaurants, now=NOW)

        self.assertEqual(queue.stats['total'], 14)
        self.assertEqual(queue.stats['pending'], 7)
        self.assertEqual(queue.stats['approved'], 6)
        self.assertEqual(queue.stats['rejected'], 1)
        self.assertEqual(queue.stats['vendors'], 10)
        self.assertEqual(queue.stats['restaurants'], 4)

    def test_pagination_is_aggregated(self):
        vendors = page([], total=10, limit=12)
        restaurants = page([], total=5, limit=12)
        queue = aggregate(QueueRequest(), vendors, restaurants, now=NOW)

        self.assertEqual(queue.pagination, {'page': 1, 'limit': 12, 'total': 15, 'pages': 2})

    def test_type_filter_uses_single_source(self):
        restaurants = page([make_record('r1', 'restaurant', now=NOW)], total=30)
        request = QueueRequest(type='restaurant')
        queue = aggregate(request, None, restaurants, now=NOW)

        self.assertEqual([item.kind for item in queue.items], ['restaurant'])
        self.assertEqual(queue.pagination['total'], 30)
        self.assertEqual(queue.pagination['pages'], 3)
        self.assertNotIn('vendor', {item.kind for item in queue.items})

    def test_missing_source_page_fails(self):
        with self.assertRaises(AggregationFailure) as ctx:
            aggregate(QueueRequest(), self.vendors, None, now=NOW)

        self.assertEqual(ctx.exception.source, 'restaurant')


class LoadQueueTestCase(SimpleTestCase):
    """Fetching both sources through the request object."""

    def test_filters_are_passed_to_both_sources(self):
        seen = []

        def fetch(filters):
            seen.append(filters)
            return page([])

        request = QueueRequest(filters=QueueFilters(status='pending', search='farm', page=2))
        load_queue(request, fetch, fetch, now=NOW)

        self.assertEqual(len(seen), 2)
        self.assertTrue(all(filters == request.filters for filters in seen))

    def test_type_filter_skips_other_source(self):
        def fail(filters):
            raise AssertionError('vendor source must not be fetched')

        queue = load_queue(QueueRequest(type='restaurant'), fail, lambda filters: page([]), now=NOW)

        self.assertEqual(queue.items, [])

    def test_source_failure_is_whole_queue_failure(self):
        def broken(filters):
            raise ConnectionError('restaurant service unavailable')

        with self.assertRaises(AggregationFailure) as ctx:
            load_queue(QueueRequest(), lambda filters: page([]), broken, now=NOW)

        self.assertEqual(ctx.exception.source, 'restaurant')
        self.assertIsInstance(ctx.exception.error, ConnectionError)

    def test_invalid_filters(self):
        invalid = [
            QueueRequest(type='listing'),
            QueueRequest(filters=QueueFilters(status='archived')),
            QueueRequest(filters=QueueFilters(page=0)),
            QueueRequest(filters=QueueFilters(limit=1000)),
            QueueRequest(filters=QueueFilters(sort_by='email')),
        ]
        for request in invalid:
            with self.subTest(request=request):
                with self.assertRaises(ValidationError):
                    load_queue(request, lambda filters: page([]), lambda filters: page([]), now=NOW)

    def test_with_page(self):
        request = QueueRequest(filters=QueueFilters(search='farm'), type='vendor')
        moved = request.with_page(3)

        self.assertEqual(moved.filters.page, 3)
        self.assertEqual(moved.filters.search, 'farm')
        self.assertEqual(request.filters.page, 1)
