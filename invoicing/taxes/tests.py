"""
Test suite for the taxes module
Tests: rate precedence, default configuration and tax endpoints
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.taxes.models import TaxConfiguration
from invoicing.taxes.services import get_applicable_tax_rate, get_default_tax_configuration, set_default_tax_configuration


class TaxConfigurationModelTests(TestCase):
    """Test TaxConfiguration applicability"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.today = timezone.localdate()

    def test_applicable_window(self):
        config = TestDataFactory.create_tax_configuration(
            self.company, applicable_from=self.today, applicable_until=self.today + timedelta(days=10)
        )
        self.assertTrue(config.is_applicable_on(self.today))
        self.assertFalse(config.is_applicable_on(self.today - timedelta(days=1)))
        self.assertFalse(config.is_applicable_on(self.today + timedelta(days=11)))

    def test_inactive_not_applicable(self):
        config = TestDataFactory.create_tax_configuration(self.company, is_active=False)
        self.assertFalse(config.is_applicable_on(self.today))

    def test_effective_status_expired(self):
        config = TestDataFactory.create_tax_configuration(self.company, applicable_until=self.today - timedelta(days=1))
        self.assertFalse(config.effective_status)


class ApplicableRateTests(TestCase):
    """Test VAT rate precedence"""

    def setUp(self):
        self.company = TestDataFactory.create_company(vat_rate=Decimal('16.00'))
        self.customer = TestDataFactory.create_customer(self.company)

    def test_company_rate_is_fallback(self):
        self.assertEqual(get_applicable_tax_rate(self.company), Decimal('16.00'))

    def test_default_configuration_beats_company_rate(self):
        TestDataFactory.create_tax_configuration(self.company, rate=Decimal('14.00'), is_default=True)
        self.assertEqual(get_applicable_tax_rate(self.company), Decimal('14.00'))

    def test_product_configuration_beats_default(self):
        TestDataFactory.create_tax_configuration(self.company, rate=Decimal('14.00'), is_default=True)
        reduced = TestDataFactory.create_tax_configuration(self.company, rate=Decimal('8.00'))
        product = TestDataFactory.create_product(self.company, tax_configuration=reduced)
        self.assertEqual(get_applicable_tax_rate(self.company, product=product), Decimal('8.00'))

    def test_product_rate_beats_configuration(self):
        reduced = TestDataFactory.create_tax_configuration(self.company, rate=Decimal('8.00'))
        product = TestDataFactory.create_product(self.company, tax_configuration=reduced, tax_rate=Decimal('2.00'))
        self.assertEqual(get_applicable_tax_rate(self.company, product=product), Decimal('2.00'))

    def test_non_taxable_product(self):
        product = TestDataFactory.create_product(self.company, taxable=False, tax_rate=Decimal('16.00'))
        self.assertEqual(get_applicable_tax_rate(self.company, product=product), Decimal('0.00'))

    def test_exempt_customer(self):
        exempt = TestDataFactory.create_customer(self.company, is_tax_exempt=True)
        product = TestDataFactory.create_product(self.company, tax_rate=Decimal('16.00'))
        self.assertEqual(get_applicable_tax_rate(self.company, product=product, customer=exempt), Decimal('0.00'))

    def test_expired_product_configuration_falls_through(self):
        expired = TestDataFactory.create_tax_configuration(
            self.company, rate=Decimal('8.00'), applicable_until=timezone.localdate() - timedelta(days=1)
        )
        product = TestDataFactory.create_product(self.company, tax_configuration=expired)
        self.assertEqual(get_applicable_tax_rate(self.company, product=product), Decimal('16.00'))

    def test_single_default(self):
        first = TestDataFactory.create_tax_configuration(self.company, is_default=True)
        second = TestDataFactory.create_tax_configuration(self.company)
        set_default_tax_configuration(second)
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertEqual(get_default_tax_configuration(self.company), second)


class TaxAPITests(TestCase):
    """Test tax configuration endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_uppercases_code(self):
        response = self.client.post('/api/v1/taxes/', {'name': 'Standard VAT', 'code': ' vat16 ', 'rate': '16.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'VAT16')

    def test_duplicate_code_rejected(self):
        TestDataFactory.create_tax_configuration(self.company, code='VAT16')
        response = self.client.post('/api/v1/taxes/', {'name': 'Again', 'code': 'vat16', 'rate': '16.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rate_out_of_range(self):
        response = self.client.post('/api/v1/taxes/', {'name': 'Bad', 'code': 'BAD', 'rate': '120'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_until_before_from_rejected(self):
        response = self.client.post('/api/v1/taxes/', {
            'name': 'Window', 'code': 'WIN', 'rate': '10',
            'applicable_from': '2026-06-01', 'applicable_until': '2026-05-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_new_default_unsets_previous(self):
        old = TestDataFactory.create_tax_configuration(self.company, is_default=True)
        response = self.client.post('/api/v1/taxes/', {
            'name': 'New VAT', 'code': 'NEW', 'rate': '15', 'is_default': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        old.refresh_from_db()
        self.assertFalse(old.is_default)
        self.assertEqual(TaxConfiguration.objects.filter(company=self.company, is_default=True).count(), 1)

    def test_delete_in_use_rejected(self):
        config = TestDataFactory.create_tax_configuration(self.company)
        TestDataFactory.create_product(self.company, tax_configuration=config)
        response = self.client.delete(f'/api/v1/taxes/{config.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('in use', response.data['error'])

    def test_delete_unused(self):
        config = TestDataFactory.create_tax_configuration(self.company)
        response = self.client.delete(f'/api/v1/taxes/{config.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(TaxConfiguration.objects.filter(pk=config.pk).exists())

    def test_active_only(self):
        TestDataFactory.create_tax_configuration(self.company)
        TestDataFactory.create_tax_configuration(self.company, is_active=False)
        response = self.client.get('/api/v1/taxes/?active_only=true')
        self.assertEqual(len(response.data), 1)

    def test_exemption_reasons(self):
        TestDataFactory.create_exemption_reason(self.company, name='Diplomatic')
        TestDataFactory.create_exemption_reason(TestDataFactory.create_company(), name='Foreign')
        response = self.client.get('/api/v1/taxes/exemptions/reasons/')
        self.assertEqual([reason['name'] for reason in response.data], ['Diplomatic'])

    def test_applicable_rate_endpoint(self):
        product = TestDataFactory.create_product(self.company, tax_rate=Decimal('8.00'))
        exempt = TestDataFactory.create_customer(self.company, is_tax_exempt=True)

        response = self.client.get(f'/api/v1/taxes/applicable-rate/?product={product.id}')
        self.assertEqual(Decimal(response.data['rate']), Decimal('8.00'))

        response = self.client.get(f'/api/v1/taxes/applicable-rate/?product={product.id}&customer={exempt.id}')
        self.assertEqual(Decimal(response.data['rate']), Decimal('0.00'))
