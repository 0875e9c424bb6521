"""
Tests for listing and category bulk actions.
"""
from decimal import Decimal
from unittest import mock
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase
from django.urls import reverse
from apps.marketplace.models import Category, Listing
from apps.marketplace.services.bulk_actions import (
    dispatch_category_bulk_action,
    dispatch_listing_bulk_action,
)
from apps.verification.tests.base import BaseVerificationTestCase, APIEndpointTestMixin
from common.models import AdminActionLog


class DispatchListingBulkActionTestCase(SimpleTestCase):
    """Request validation happens before any listing is touched."""

    def test_delete_without_reason_makes_no_call(self):
        resolver = mock.Mock()

        with self.assertRaises(ValidationError) as ctx:
            dispatch_listing_bulk_action(
                {'action': 'delete_listings', 'listing_ids': ['a', 'b'], 'reason': ''},
                resolver=resolver
            )

        self.assertIn('reason', ctx.exception.message_dict)
        resolver.assert_not_called()

    def test_reason_inside_data(self):
        resolver = mock.Mock()

        result = dispatch_listing_bulk_action(
            {'action': 'delete_listings', 'listing_ids': ['a'], 'data': {'reason': 'Counterfeit'}},
            resolver=resolver
        )

        resolver.assert_called_once_with('listing', 'a', 'delete_listings', {'reason': 'Counterfeit'})
        self.assertEqual(result.succeeded, ['a'])

    def test_category_action_is_refused(self):
        resolver = mock.Mock()

        with self.assertRaises(ValidationError):
            dispatch_listing_bulk_action(
                {'action': 'delete_categories', 'listing_ids': ['a'], 'reason': 'x'},
                resolver=resolver
            )
        resolver.assert_not_called()

    def test_verification_action_is_refused_for_categories(self):
        with self.assertRaises(ValidationError):
            dispatch_category_bulk_action(
                {'action': 'approve_verification', 'category_ids': ['a'], 'reason': 'x'},
                resolver=mock.Mock()
            )


class MarketplaceBulkActionTestCase(BaseVerificationTestCase):
    """Bulk actions against the ORM-backed services."""

    def setUp(self):
        super().setUp()
        self.vendor = self.create_vendor()
        self.category = Category.objects.create(name='Fresh Produce')
        self.empty_category = Category.objects.create(name='Seasonal')
        self.listings = [
            Listing.objects.create(
                vendor=self.vendor, category=self.category, title=f'Crate {i}', price=Decimal('10.00')
            )
            for i in range(3)
        ]

    def ids(self, objects):
        return [str(obj.id) for obj in objects]

    def test_update_status(self):
        result = dispatch_listing_bulk_action({
            'action': 'update_status',
            'listing_ids': self.ids(self.listings[:2]),
            'data': {'status': 'out_of_stock'},
        })

        self.assertTrue(result.all_succeeded)
        self.assertEqual(Listing.objects.filter(status='out_of_stock').count(), 2)

    def test_toggle_featured(self):
        self.listings[0].is_featured = True
        self.listings[0].save()

        dispatch_listing_bulk_action({'action': 'toggle_featured', 'listing_ids': self.ids(self.listings[:2])})

        self.listings[0].refresh_from_db()
        self.listings[1].refresh_from_db()
        self.assertFalse(self.listings[0].is_featured)
        self.assertTrue(self.listings[1].is_featured)

    def test_flag_and_unflag(self):
        dispatch_listing_bulk_action({
            'action': 'flag_listings',
            'listing_ids': self.ids(self.listings),
            'data': {'flag_reason': 'misleading_information'},
            'reason': 'Photos do not match',
        }, performed_by=self.admin_user)

        listing = Listing.objects.get(id=self.listings[0].id)
        self.assertTrue(listing.is_flagged)
        self.assertEqual(listing.flag_reason, 'misleading_information')
        self.assertEqual(listing.flag_notes, 'Photos do not match')
        self.assertEqual(listing.flagged_by, self.admin_user)

        dispatch_listing_bulk_action({'action': 'unflag_listings', 'listing_ids': self.ids(self.listings)})
        self.assertFalse(Listing.objects.filter(is_flagged=True).exists())

    def test_delete_with_unknown_listing(self):
        targets = [str(self.listings[0].id), 'not-a-uuid', str(self.listings[2].id)]

        result = dispatch_listing_bulk_action({
            'action': 'delete_listings',
            'listing_ids': targets,
            'reason': 'Counterfeit goods',
        })

        self.assertEqual(result.succeeded, [targets[0], targets[2]])
        self.assertEqual([item['id'] for item in result.failed], ['not-a-uuid'])
        self.assertEqual(Listing.objects.count(), 1)

    def test_flag_categories(self):
        result = dispatch_category_bulk_action({
            'action': 'flag_categories',
            'category_ids': self.ids([self.category, self.empty_category]),
            'reason': 'Duplicate of another category',
        })

        self.assertTrue(result.all_succeeded)
        self.category.refresh_from_db()
        self.assertTrue(self.category.is_flagged)
        self.assertFalse(self.category.is_available)
        self.assertEqual(self.category.flag_reason, 'Duplicate of another category')

    def test_delete_category_in_use_fails_per_item(self):
        result = dispatch_category_bulk_action({
            'action': 'delete_categories',
            'category_ids': self.ids([self.category, self.empty_category]),
            'reason': 'Cleanup',
        })

        self.assertEqual(result.succeeded, [str(self.empty_category.id)])
        self.assertEqual(result.failed[0]['id'], str(self.category.id))
        self.assertTrue(Category.objects.filter(id=self.category.id).exists())
        self.assertFalse(Category.objects.filter(id=self.empty_category.id).exists())


class MarketplaceAPITestCase(BaseVerificationTestCase, APIEndpointTestMixin):
    """Test cases for the marketplace admin endpoints."""

    def setUp(self):
        super().setUp()
        self.listing_url = reverse('marketplace:listing_bulk_action')
        self.category_url = reverse('marketplace:category_bulk_action')
        self.vendor = self.create_vendor()
        self.category = Category.objects.create(name='Bakery')
        self.listing = Listing.objects.create(
            vendor=self.vendor, category=self.category, title='Sourdough', price=Decimal('4.50')
        )

    def test_listing_bulk_action(self):
        self.authenticate(self.admin_user)

        response = self.client.post(self.listing_url, {
            'action': 'flag_listings',
            'listing_ids': [str(self.listing.id)],
            'data': {'flag_reason': 'quality_issues'},
            'reason': 'Customer complaints',
        }, format='json')

        self.assert_response_success(response)
        self.assertEqual(response.data['succeeded'], [str(self.listing.id)])
        self.assertTrue(
            AdminActionLog.objects.filter(action=AdminActionLog.Action.BULK_LISTING_ACTION).exists()
        )

    def test_listing_bulk_action_missing_reason(self):
        self.authenticate(self.admin_user)

        response = self.client.post(self.listing_url, {
            'action': 'delete_listings', 'listing_ids': [str(self.listing.id)]
        }, format='json')

        self.assert_response_error(response, 400)
        self.assertTrue(Listing.objects.filter(id=self.listing.id).exists())

    def test_category_reason_too_long(self):
        self.authenticate(self.admin_user)

        response = self.client.post(self.category_url, {
            'action': 'flag_categories',
            'category_ids': [str(self.category.id)],
            'reason': 'x' * 501,
        }, format='json')

        self.assert_response_error(response, 400)
        self.category.refresh_from_db()
        self.assertFalse(self.category.is_flagged)

    def test_list_endpoints(self):
        self.authenticate(self.support_user)

        response = self.client.get(reverse('marketplace:list_listings'), {'search': 'sour'})
        self.assert_response_success(response)
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.client.get(reverse('marketplace:list_categories'))
        self.assert_response_success(response)
        self.assertEqual(response.data['items'][0]['listing_count'], 1)

    def test_requires_reviewer(self):
        self.assert_requires_admin(self.listing_url, 'post', {'action': 'toggle_featured', 'listing_ids': []})
