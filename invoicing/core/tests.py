"""
Test suite for the core module
Tests: authentication, company context, company settings, activity log and settings access
"""
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from invoicing.core.conf import invoicing_setting
from invoicing.core.models import AuditLog
from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.core.utils import create_audit_log


class InvoicingSettingTests(TestCase):
    """Test invoicing_setting defaults and overrides"""

    def test_vat_rate_is_decimal(self):
        self.assertEqual(invoicing_setting('DEFAULT_VAT_RATE'), Decimal('16.00'))

    @override_settings(INVOICING={'PAYMENT_TERMS_DAYS': 14})
    def test_override_and_default(self):
        self.assertEqual(invoicing_setting('PAYMENT_TERMS_DAYS'), 14)
        self.assertEqual(invoicing_setting('DOCUMENT_VALIDITY_DAYS'), 30)

    def test_unknown_setting(self):
        with self.assertRaises(KeyError):
            invoicing_setting('NOT_A_SETTING')


class AuthTests(TestCase):
    """Test token endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company, username='cashier', password='s3cret-pass')
        self.client = APIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'cashier', 'password': 's3cret-pass'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['company'], self.company.id)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'cashier', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'cashier', 'password': 's3cret-pass'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.data['username'], 'cashier')

    def test_health_is_public(self):
        response = self.client.get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['database'], 'connected')


class CompanyContextTests(TestCase):
    """Test company resolution from the user and X-Company-Id"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.other = TestDataFactory.create_company()

    def test_user_without_company(self):
        user = TestDataFactory.create_user(company=self.company)
        user.company = None
        user.save()
        client = AuthenticatedAPIClient().authenticate_user(user)
        response = client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_header_for_foreign_company_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(company=self.company))
        response = client.get('/api/v1/customers/', HTTP_X_COMPANY_ID=str(self.other.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_superuser_may_switch_company(self):
        TestDataFactory.create_customer(self.other)
        admin = TestDataFactory.create_user(company=self.company, is_staff=True, is_superuser=True)
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.get('/api/v1/customers/', HTTP_X_COMPANY_ID=str(self.other.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_unknown_company_header(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(company=self.company))
        response = client.get('/api/v1/customers/', HTTP_X_COMPANY_ID='abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CompanySettingsTests(TestCase):
    """Test company settings endpoint"""

    def setUp(self):
        self.company = TestDataFactory.create_company()

    def test_read_settings(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(company=self.company))
        response = client.get('/api/v1/company/')
        self.assertEqual(response.data['name'], self.company.name)

    def test_non_staff_cannot_update(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(company=self.company))
        response = client.patch('/api/v1/company/', {'vat_rate': '14.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_update_and_validation(self):
        client = AuthenticatedAPIClient().authenticate_user(
            TestDataFactory.create_user(company=self.company, is_staff=True)
        )
        response = client.patch('/api/v1/company/', {'vat_rate': '14.00', 'invoice_prefix': 'TAX'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.company.refresh_from_db()
        self.assertEqual(self.company.vat_rate, Decimal('14.00'))

        response = client.patch('/api/v1/company/', {'vat_rate': '150.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogTests(TestCase):
    """Test audit log helper and activity log endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Customer'))
        self.assertFalse(AuditLog.objects.exists())

    def test_create_with_user(self):
        log = create_audit_log(
            action='create', model_name='Customer', object_id=5, user=self.user,
            object_reference='Acme', company=self.company
        )
        self.assertEqual(log.object_id, '5')
        self.assertEqual(log.user, self.user)

    def test_activity_log_scoped_and_filtered(self):
        create_audit_log(action='create', model_name='Customer', object_id=1, object_reference='Acme', company=self.company)
        create_audit_log(action='delete', model_name='Product', object_id=2, object_reference='SKU-1', company=self.company)
        create_audit_log(action='create', model_name='Customer', object_id=3, company=TestDataFactory.create_company())

        response = self.client.get('/api/v1/activity-log/')
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/v1/activity-log/?action=delete')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['object_reference'], 'SKU-1')

        log_id = response.data['results'][0]['id']
        response = self.client.get(f'/api/v1/activity-log/{log_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_pagination_envelope(self):
        for index in range(3):
            create_audit_log(action='create', model_name='Customer', object_id=index + 1, company=self.company)
        response = self.client.get('/api/v1/activity-log/?limit=2&page=2')
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['page'], 2)
        self.assertEqual(len(response.data['results']), 1)
        self.assertIsNone(response.data['next'])
        self.assertEqual(response.data['previous'], 1)
