"""
Test suite for the reports module
Tests: dashboard metrics, sales summary, aged receivables and statement of account
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.core.utils import create_audit_log
from invoicing.reports.views import aging_bucket
from invoicing.sales.services import record_payment, set_status


class AgingBucketTests(TestCase):
    """Test aging_bucket boundaries"""

    def test_boundaries(self):
        today = timezone.localdate()
        self.assertEqual(aging_bucket(today, today), 'current')
        self.assertEqual(aging_bucket(today + timedelta(days=5), today), 'current')
        self.assertEqual(aging_bucket(today - timedelta(days=1), today), 'days30')
        self.assertEqual(aging_bucket(today - timedelta(days=30), today), 'days30')
        self.assertEqual(aging_bucket(today - timedelta(days=31), today), 'days60')
        self.assertEqual(aging_bucket(today - timedelta(days=90), today), 'days90')
        self.assertEqual(aging_bucket(today - timedelta(days=91), today), 'over90')


class ReportsTests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        self.today = timezone.localdate()
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

        self.customer = TestDataFactory.create_customer(self.company, name='Acme Ltd')
        self.product = TestDataFactory.create_product(self.company, name='Widget')
        items = [TestDataFactory.line(self.product, Decimal('2'), Decimal('100.00'), vat_rate=Decimal('16.00'))]

        # 232.00 each
        self.current_invoice = TestDataFactory.create_invoice(self.company, self.customer, items, status='sent')
        self.old_invoice = TestDataFactory.create_invoice(
            self.company, self.customer, items, status='sent',
            issue_date=self.today - timedelta(days=50), due_date=self.today - timedelta(days=40)
        )
        cancelled = TestDataFactory.create_invoice(self.company, self.customer, items)
        set_status(cancelled, 'cancelled')
        record_payment(self.current_invoice, Decimal('100.00'), 'mpesa', reference='MP-1')

        other_company = TestDataFactory.create_company()
        TestDataFactory.create_invoice(other_company, TestDataFactory.create_customer(other_company))

    def test_dashboard_metrics(self):
        create_audit_log(
            action='invoice_create', model_name='Invoice', object_id=self.current_invoice.id,
            object_reference=self.current_invoice.invoice_number, company=self.company
        )
        response = self.client.get('/api/v1/dashboard/metrics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 100.0)
        self.assertEqual(response.data['outstanding_invoices'], 364.0)
        self.assertEqual(response.data['recent_payments'], 100.0)
        self.assertEqual(response.data['low_stock_alerts'], 1)

        trend = response.data['sales_trend']
        self.assertEqual(len(trend), 7)
        self.assertEqual(trend[-1], {'date': self.today.isoformat(), 'amount': 232.0})
        self.assertEqual(sum(day['amount'] for day in trend), 232.0)

        self.assertEqual(len(response.data['top_products']), 1)
        self.assertEqual(response.data['top_products'][0]['name'], 'Widget')
        self.assertEqual(response.data['top_products'][0]['sales'], 464.0)

        self.assertEqual(len(response.data['recent_activities']), 1)
        self.assertEqual(response.data['recent_activities'][0]['type'], 'Invoice')

    def test_sales_summary(self):
        response = self.client.get('/api/v1/reports/sales-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_invoices'], 1)

        date_from = (self.today - timedelta(days=60)).isoformat()
        response = self.client.get(f'/api/v1/reports/sales-summary/?date_from={date_from}&date_to={self.today.isoformat()}')
        summary = response.data['summary']
        self.assertEqual(summary['total_sales'], 464.0)
        self.assertEqual(summary['total_invoices'], 2)
        self.assertEqual(summary['total_paid'], 100.0)
        self.assertEqual(summary['total_outstanding'], 364.0)
        self.assertEqual(summary['avg_order_value'], 232.0)
        self.assertEqual(len(response.data['daily_breakdown']), 2)

    def test_sales_summary_bad_date(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=01-01-2026')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_aged_receivables(self):
        response = self.client.get('/api/v1/reports/aged-receivables/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['customers']), 1)
        row = response.data['customers'][0]
        self.assertEqual(row['customer_name'], 'Acme Ltd')
        self.assertEqual(row['current'], 132.0)
        self.assertEqual(row['days60'], 232.0)
        self.assertEqual(row['total'], 364.0)
        self.assertEqual(response.data['totals']['total'], 364.0)

    def test_statement_requires_customer(self):
        response = self.client.get('/api/v1/reports/statement-of-account/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_statement_of_account(self):
        response = self.client.get(f'/api/v1/reports/statement-of-account/?customer={self.customer.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        invoices = response.data['invoices']
        self.assertEqual([row['invoice'] for row in invoices], [self.old_invoice.invoice_number, self.current_invoice.invoice_number])
        self.assertEqual(invoices[0]['status'], 'overdue')
        self.assertEqual(invoices[1]['status'], 'current')
        self.assertEqual(invoices[1]['paid_amount'], 100.0)
        self.assertEqual(len(response.data['payments']), 1)

        self.assertEqual([entry['balance'] for entry in response.data['ledger']], [232.0, 464.0, 364.0])
        self.assertEqual(response.data['closing_balance'], 364.0)
        self.assertEqual(response.data['aging']['days60'], 232.0)

    def test_statement_opening_balance(self):
        start = (self.today - timedelta(days=10)).isoformat()
        response = self.client.get(
            f'/api/v1/reports/statement-of-account/?customer={self.customer.id}&start_date={start}'
        )
        self.assertEqual(response.data['opening_balance'], 232.0)
        self.assertEqual(len(response.data['invoices']), 1)
        self.assertEqual(response.data['closing_balance'], 364.0)

    def test_statement_other_company_customer(self):
        other_company = TestDataFactory.create_company()
        customer = TestDataFactory.create_customer(other_company)
        response = self.client.get(f'/api/v1/reports/statement-of-account/?customer={customer.id}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_statement_skips_payments_of_cancelled_invoices(self):
        customer = TestDataFactory.create_customer(self.company)
        invoice = TestDataFactory.create_invoice(self.company, customer, status='sent')
        record_payment(invoice, Decimal('10.00'), 'cash')
        set_status(invoice, 'cancelled')
        customer.refresh_from_db()

        response = self.client.get(f'/api/v1/reports/statement-of-account/?customer={customer.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoices'], [])
        self.assertEqual(response.data['payments'], [])
        self.assertEqual(response.data['ledger'], [])
        self.assertEqual(response.data['closing_balance'], float(customer.current_balance))
        self.assertEqual(response.data['closing_balance'], 0.0)
