"""
Test suite for the parties module
Tests: customer CRUD, soft delete, outstanding balance and balance repair
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework import status

from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.parties.models import Customer
from invoicing.sales.services import record_payment, set_status


class CustomerModelTests(TestCase):
    """Test Customer model helpers"""

    def setUp(self):
        self.company = TestDataFactory.create_company()

    def test_available_credit(self):
        customer = TestDataFactory.create_customer(self.company, credit_limit=Decimal('1000.00'))
        customer.current_balance = Decimal('250.00')
        self.assertEqual(customer.available_credit, Decimal('750.00'))

    def test_available_credit_without_limit(self):
        customer = TestDataFactory.create_customer(self.company)
        self.assertIsNone(customer.available_credit)

    def test_has_documents(self):
        customer = TestDataFactory.create_customer(self.company)
        self.assertFalse(customer.has_documents())
        TestDataFactory.create_quotation(self.company, customer)
        self.assertTrue(customer.has_documents())


class CustomerAPITests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'name': 'Acme Ltd',
            'email': 'accounts@acme.test',
            'phone': '0712345678',
            'kra_pin': 'P051234567A',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['balance']), Decimal('0.00'))
        customer = Customer.objects.get(pk=response.data['id'])
        self.assertEqual(customer.company, self.company)
        self.assertEqual(customer.created_by, self.user)

    def test_balance_is_read_only(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Acme', 'balance': '500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Customer.objects.get(pk=response.data['id']).current_balance, Decimal('0.00'))

    def test_blank_name_rejected(self):
        response = self.client.post('/api/v1/customers/', {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_exemption_reason_cleared_when_not_exempt(self):
        reason = TestDataFactory.create_exemption_reason(self.company)
        response = self.client.post('/api/v1/customers/', {
            'name': 'Embassy',
            'is_tax_exempt': False,
            'exemption_reason': reason.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['exemption_reason'])

    def test_list_search_and_scope(self):
        TestDataFactory.create_customer(self.company, name='Alpha Traders')
        TestDataFactory.create_customer(self.company, name='Beta Supplies')
        TestDataFactory.create_customer(TestDataFactory.create_company(), name='Alpha Foreign')

        response = self.client.get('/api/v1/customers/?search=alpha')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Alpha Traders')

    def test_delete_customer_without_documents(self):
        customer = TestDataFactory.create_customer(self.company)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Customer.objects.filter(pk=customer.pk).exists())

    def test_delete_customer_with_documents_deactivates(self):
        customer = TestDataFactory.create_customer(self.company)
        TestDataFactory.create_invoice(self.company, customer)

        response = self.client.delete(f'/api/v1/customers/{customer.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        customer.refresh_from_db()
        self.assertFalse(customer.is_active)

    def test_inactive_customer_cannot_get_documents(self):
        customer = TestDataFactory.create_customer(self.company, is_active=False)
        product = TestDataFactory.create_product(self.company)
        response = self.client.post('/api/v1/quotations/', {
            'customer': customer.id,
            'items': [{'product': product.id, 'quantity': '1'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_outstanding(self):
        customer = TestDataFactory.create_customer(self.company)
        first = TestDataFactory.create_invoice(self.company, customer)
        TestDataFactory.create_invoice(self.company, customer)
        cancelled = TestDataFactory.create_invoice(self.company, customer)
        record_payment(first, Decimal('32.00'), 'cash')
        set_status(cancelled, 'cancelled')

        response = self.client.get(f'/api/v1/customers/{customer.id}/outstanding/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['balance']), Decimal('432.00'))
        self.assertEqual(Decimal(response.data['current_balance']), Decimal('432.00'))

    def test_other_company_customer_not_found(self):
        customer = TestDataFactory.create_customer(TestDataFactory.create_company())
        response = self.client.get(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RepairCustomerBalancesCommandTests(TestCase):
    """Test the repair_customer_balances management command"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.customer = TestDataFactory.create_customer(self.company)
        TestDataFactory.create_invoice(self.company, self.customer)
        Customer.objects.filter(pk=self.customer.pk).update(current_balance=Decimal('999.00'))

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('repair_customer_balances', '--dry-run', stdout=out)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('999.00'))
        self.assertIn('1 customer(s) corrected', out.getvalue())

    def test_repairs_balance(self):
        call_command('repair_customer_balances', stdout=StringIO())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('232.00'))
