"""
Base test classes and fixtures for verification tests.
"""
from datetime import timedelta
from django.test import TestCase
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from apps.verification.constants import VerificationStatus
from apps.verification.models import Restaurant, Vendor

User = get_user_model()


def make_record(entity_id='1', kind='vendor', name='Fresh Farm', days_old=0,
                now=None, verification=None, approval_status='pending', **extra):
    """Raw record in the shape the queue sources return."""
    now = now or timezone.now()
    record = {
        'id': entity_id,
        'kind': kind,
        'name': name,
        'approval_status': approval_status,
        'created_at': now - timedelta(days=days_old),
    }
    if verification is not None:
        record['verification'] = verification
    record.update(extra)
    return record


class BaseVerificationTestCase(TestCase):
    """Base test case with common setup for verification tests."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = APIClient()

        # Create regular user
        self.user = User.objects.create_user(
            email='testuser@example.com',
            password='TestPass123!',
            name='Test Owner',
            role=User.Role.BUYER
        )

        # Create admin user
        self.admin_user = User.objects.create_user(
            email='admin@example.com',
            password='AdminPass123!',
            role=User.Role.ADMIN
        )

        # Create support user
        self.support_user = User.objects.create_user(
            email='support@example.com',
            password='SupportPass123!',
            role=User.Role.SUPPORT
        )

    def authenticate(self, user=None):
        """Authenticate a user for API requests."""
        if user is None:
            user = self.user
        self.client.force_authenticate(user=user)

    def create_vendor(self, name='Fresh Farm Produce', days_old=0, owner=None, **fields):
        """Create a vendor submitted ``days_old`` days ago."""
        return Vendor.objects.create(
            name=name,
            owner=owner,
            created_at=timezone.now() - timedelta(days=days_old),
            **fields
        )

    def create_restaurant(self, name='Nile Kitchen', days_old=0, owner=None, **fields):
        """Create a restaurant submitted ``days_old`` days ago."""
        return Restaurant.objects.create(
            name=name,
            owner=owner,
            created_at=timezone.now() - timedelta(days=days_old),
            **fields
        )

    def mark_verified(self, entity):
        """Put an entity into the verified state directly."""
        entity.verification_status = VerificationStatus.APPROVED
        entity.is_verified = True
        entity.verification_date = timezone.now()
        entity.status_updated_at = timezone.now()
        entity.admin_notes = 'Documents checked'
        entity.save()
        return entity

    def mark_rejected(self, entity):
        """Put an entity into the unverified state directly."""
        entity.verification_status = VerificationStatus.REJECTED
        entity.is_verified = False
        entity.status_updated_at = timezone.now()
        entity.admin_notes = 'Licence expired'
        entity.save()
        return entity


class APIEndpointTestMixin:
    """Mixin for testing API endpoints with common assertions."""

    def assert_response_success(self, response, status_code=200):
        """Assert response is successful."""
        self.assertEqual(response.status_code, status_code)

    def assert_response_error(self, response, status_code=400):
        """Assert response is an error."""
        self.assertEqual(response.status_code, status_code)

    def assert_requires_authentication(self, url, method='get'):
        """Assert endpoint requires authentication."""
        self.client.force_authenticate(user=None)

        if method == 'get':
            response = self.client.get(url)
        else:
            response = self.client.post(url, {}, format='json')

        self.assertEqual(response.status_code, 401)

    def assert_requires_admin(self, url, method='get', data=None):
        """Assert endpoint requires admin or support role."""
        self.authenticate(self.user)  # Regular user

        if method == 'get':
            response = self.client.get(url)
        else:
            response = self.client.post(url, data or {}, format='json')

        self.assertEqual(response.status_code, 403)
