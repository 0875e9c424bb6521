"""
Tests for console users and JWT login.
"""
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient
from apps.accounts.models import User


class UserModelTestCase(TestCase):

    def test_reviewer_roles(self):
        admin = User.objects.create_user(email='admin@example.com', password='pass', role=User.Role.ADMIN)
        support = User.objects.create_support_user(email='support@example.com', password='pass')
        vendor = User.objects.create_user(email='vendor@example.com', password='pass', role=User.Role.VENDOR)
        staff = User.objects.create_user(email='staff@example.com', password='pass', is_staff=True)

        self.assertTrue(admin.is_reviewer)
        self.assertTrue(support.is_reviewer)
        self.assertFalse(vendor.is_reviewer)
        self.assertTrue(staff.is_reviewer)

    def test_superuser_defaults_to_admin(self):
        user = User.objects.create_superuser(email='root@example.com', password='pass')

        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.is_staff)

    def test_ban_and_unban(self):
        user = User.objects.create_user(email='user@example.com', password='pass')

        user.ban('Abuse')
        user.refresh_from_db()
        self.assertTrue(user.is_banned)
        self.assertIsNotNone(user.banned_at)

        user.unban()
        user.refresh_from_db()
        self.assertFalse(user.is_banned)
        self.assertIsNone(user.ban_reason)


class ConsoleLoginTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse('accounts:token')
        self.user = User.objects.create_user(
            email='support@example.com', password='SupportPass123!', role=User.Role.SUPPORT
        )

    def test_login_returns_role(self):
        response = self.client.post(self.url, {
            'email': 'support@example.com', 'password': 'SupportPass123!'
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['role'], User.Role.SUPPORT)

    def test_banned_user_cannot_login(self):
        self.user.ban('Compromised')

        response = self.client.post(self.url, {
            'email': 'support@example.com', 'password': 'SupportPass123!'
        }, format='json')

        self.assertEqual(response.status_code, 401)

    def test_wrong_password(self):
        response = self.client.post(self.url, {
            'email': 'support@example.com', 'password': 'wrong'
        }, format='json')

        self.assertEqual(response.status_code, 401)

    def test_token_authenticates_queue(self):
        response = self.client.post(self.url, {
            'email': 'support@example.com', 'password': 'SupportPass123!'
        }, format='json')
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

        response = self.client.get(reverse('verification:approval_queue'))

        self.assertEqual(response.status_code, 200)
