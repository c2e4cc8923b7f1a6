"""
Test suite for the Core module
Tests: authentication, sequences, audit logging and the ensure_admin command
"""
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from shopledger.core.models import AuditLog, Sequence
from shopledger.core.sequences import current_value, next_value
from shopledger.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopledger.core.utils import create_audit_log, parse_id, to_decimal, to_int
from shopledger.core.exceptions import ValidationFailed

User = get_user_model()


class AuthenticationTests(TestCase):
    """Test login, refresh, logout and current user endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='cashier', password='secret-pass')
        self.client = APIClient()

    def login(self, password='secret-pass'):
        return self.client.post('/api/v1/auth/login/', {'username': 'cashier', 'password': password}, format='json')

    def test_login_returns_tokens(self):
        response = self.login()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'cashier')

    def test_login_wrong_password(self):
        response = self.login('wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_passwords_are_hashed(self):
        self.assertNotEqual(User.objects.get(username='cashier').password, 'secret-pass')

    def test_me(self):
        access = self.login().data['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'cashier')

    def test_logout_blacklists_refresh_token(self):
        refresh = self.login().data['refresh']
        response = self.client.post('/api/v1/auth/logout/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_205_RESET_CONTENT)
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_invalid_token(self):
        response = self.client.post('/api/v1/auth/logout/', {'refresh': 'garbage'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SequenceTests(TestCase):
    """Test named counters"""

    def test_next_value_increments(self):
        self.assertEqual(current_value('invoice'), 0)
        self.assertEqual([next_value('invoice') for _ in range(3)], [1, 2, 3])
        self.assertEqual(current_value('invoice'), 3)
        self.assertEqual(Sequence.objects.count(), 1)

    def test_counters_are_independent(self):
        next_value('invoice')
        self.assertEqual(next_value('other'), 1)


class UtilsTests(TestCase):
    """Test parsing helpers and audit logging"""

    def test_to_decimal(self):
        self.assertEqual(str(to_decimal('1.005', 'amount')), '1.00')
        for value in ('abc', None, 'NaN', 'Infinity'):
            with self.assertRaises(ValidationFailed):
                to_decimal(value, 'amount')

    def test_to_decimal_out_of_range(self):
        self.assertEqual(to_decimal('999999999999.99', 'amount'), Decimal('999999999999.99'))
        for value in ('1e30', '1000000000000.00'):
            with self.assertRaises(ValidationFailed):
                to_decimal(value, 'amount')
        with self.assertRaises(ValidationFailed):
            to_decimal('10000000000.00', 'price', max_digits=12)

    def test_to_int(self):
        self.assertEqual(to_int('4', 'quantity'), 4)
        self.assertEqual(to_int(4.0, 'quantity'), 4)
        for value in (1.5, True, 'x', None):
            with self.assertRaises(ValidationFailed):
                to_int(value, 'quantity')

    def test_parse_id(self):
        self.assertIsNone(parse_id('nope'))
        self.assertIsNone(parse_id(None))
        self.assertIsNotNone(parse_id('00000000-0000-0000-0000-000000000000'))

    def test_create_audit_log(self):
        user = TestDataFactory.create_user()
        log = create_audit_log(action='create', model_name='Product', object_id='abc', user=user)
        self.assertEqual(log.user, user)
        self.assertEqual(log.changes, {})

    def test_create_audit_log_skips_incomplete(self):
        with self.assertLogs('shopledger.core.utils', level='WARNING'):
            self.assertIsNone(create_audit_log(action='create', model_name='Product'))
        self.assertEqual(AuditLog.objects.count(), 0)


class AuditLogAPITests(TestCase):
    """Test audit log listing"""

    def test_admin_only(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_action(self):
        admin = TestDataFactory.create_user(is_staff=True)
        create_audit_log(action='create', model_name='Product', object_id='1')
        create_audit_log(action='delete', model_name='Product', object_id='1')
        client = AuthenticatedAPIClient()
        client.authenticate_user(admin)
        response = client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['action'] for row in response.data], ['delete'])


class EnsureAdminCommandTests(TestCase):
    """Test the ensure_admin management command"""

    @override_settings(SHOPLEDGER_DEFAULT_ADMIN_USERNAME='admin', SHOPLEDGER_DEFAULT_ADMIN_PASSWORD='admin123')
    def test_creates_admin_when_empty(self):
        call_command('ensure_admin', stdout=StringIO())
        admin = User.objects.get(username='admin')
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.check_password('admin123'))

    def test_noop_when_users_exist(self):
        TestDataFactory.create_user()
        call_command('ensure_admin', stdout=StringIO())
        self.assertEqual(User.objects.count(), 1)
