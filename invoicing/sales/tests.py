"""
Test suite for the sales module
Tests: line calculations, number allocation, document writes, conversions, payments and API endpoints
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from invoicing.core.models import AuditLog
from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.sales.calculations import calculate_line, calculate_totals
from invoicing.sales.conversion import (
    can_convert_quotation, can_convert_proforma, conversion_options,
    convert_quotation_to_proforma, convert_quotation_to_invoice, convert_proforma_to_invoice
)
from invoicing.sales.exceptions import ConversionError, DocumentError, PaymentError, StatusTransitionError
from invoicing.sales.models import Invoice, NumberSequence, ProformaInvoice, Quotation
from invoicing.sales.numbering import _create_sequence, allocate_number
from invoicing.sales.services import (
    create_document, delete_document, record_payment, set_status, update_document
)


class LineCalculationTests(TestCase):
    """Test line and header amount arithmetic"""

    def test_vat_on_single_line(self):
        amounts = calculate_line(Decimal('1'), Decimal('25000'), Decimal('0'), Decimal('16'))
        self.assertEqual(amounts.vat_amount, Decimal('4000.00'))
        self.assertEqual(amounts.line_total, Decimal('29000.00'))

    def test_discount_applies_before_vat(self):
        amounts = calculate_line(Decimal('2'), Decimal('100.00'), Decimal('10'), Decimal('16'))
        self.assertEqual(amounts.gross, Decimal('200.00'))
        self.assertEqual(amounts.discount_amount, Decimal('20.00'))
        self.assertEqual(amounts.net, Decimal('180.00'))
        self.assertEqual(amounts.vat_amount, Decimal('28.80'))
        self.assertEqual(amounts.line_total, Decimal('208.80'))

    def test_compound_tax_includes_simple_taxes(self):
        amounts = calculate_line(
            Decimal('1'), Decimal('100.00'), Decimal('0'), Decimal('0'),
            [
                {'name': 'Levy', 'rate': '2', 'is_compound': False},
                {'name': 'Excise', 'rate': '10', 'is_compound': True},
            ]
        )
        self.assertEqual(amounts.taxes[0]['amount'], Decimal('2.00'))
        self.assertEqual(amounts.taxes[1]['amount'], Decimal('10.20'))
        self.assertEqual(amounts.additional_tax_amount, Decimal('12.20'))
        self.assertEqual(amounts.line_total, Decimal('112.20'))

    def test_half_up_rounding(self):
        amounts = calculate_line(Decimal('1'), Decimal('0.15'), Decimal('0'), Decimal('10'))
        # 0.015 rounds up to 0.02
        self.assertEqual(amounts.vat_amount, Decimal('0.02'))

    def test_invalid_lines_rejected(self):
        with self.assertRaises(ValueError):
            calculate_line(Decimal('0'), Decimal('10'))
        with self.assertRaises(ValueError):
            calculate_line(Decimal('1'), Decimal('-1'))
        with self.assertRaises(ValueError):
            calculate_line(Decimal('1'), Decimal('10'), Decimal('101'))
        with self.assertRaises(ValueError):
            calculate_line('abc', Decimal('10'))

    def test_totals_are_sums_of_lines(self):
        lines = [
            calculate_line(Decimal('1'), Decimal('25000'), Decimal('0'), Decimal('16')),
            calculate_line(Decimal('2'), Decimal('100.00'), Decimal('10'), Decimal('16')),
        ]
        totals = calculate_totals(lines)
        self.assertEqual(totals.subtotal, Decimal('25200.00'))
        self.assertEqual(totals.discount_amount, Decimal('20.00'))
        self.assertEqual(totals.vat_amount, Decimal('4028.80'))
        self.assertEqual(totals.total, Decimal('29208.80'))
        self.assertEqual(totals.total, sum(line.line_total for line in lines))


class NumberAllocationTests(TestCase):
    """Test document number sequences"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.year = timezone.localdate().year

    def test_first_number_creates_sequence(self):
        number = allocate_number(self.company, 'quotation')
        self.assertEqual(number, f'QUO-{self.year}-001')
        sequence = NumberSequence.objects.get(company=self.company, sequence_type='quotation')
        self.assertEqual(sequence.current_number, 2)

    def test_numbers_increment(self):
        first = allocate_number(self.company, 'proforma')
        second = allocate_number(self.company, 'proforma')
        self.assertEqual(first, f'PRO-{self.year}-001')
        self.assertEqual(second, f'PRO-{self.year}-002')

    def test_invoice_prefix_from_company(self):
        self.company.invoice_prefix = 'FAC'
        self.company.save()
        self.assertEqual(allocate_number(self.company, 'invoice'), f'FAC-{self.year}-001')

    def test_sequences_are_per_company(self):
        other = TestDataFactory.create_company()
        allocate_number(self.company, 'invoice')
        self.assertEqual(allocate_number(other, 'invoice'), f'INV-{self.year}-001')

    def test_numbers_already_in_use_are_skipped(self):
        customer = TestDataFactory.create_customer(self.company)
        quotation = TestDataFactory.create_quotation(self.company, customer)
        self.assertEqual(quotation.quote_number, f'QUO-{self.year}-001')
        NumberSequence.objects.filter(company=self.company, sequence_type='quotation').update(current_number=1)

        self.assertEqual(allocate_number(self.company, 'quotation'), f'QUO-{self.year}-002')

    def test_concurrently_created_sequence_is_used(self):
        """When another writer inserts the sequence row first, its counter is used"""
        def insert_first(company, sequence_type):
            NumberSequence.objects.create(
                company=company, sequence_type=sequence_type, prefix='QUO',
                current_number=5, padding_length=3
            )
            return None

        with mock.patch('invoicing.sales.numbering._create_sequence', side_effect=insert_first):
            number = allocate_number(self.company, 'quotation')

        self.assertEqual(number, f'QUO-{self.year}-005')
        sequence = NumberSequence.objects.get(company=self.company, sequence_type='quotation')
        self.assertEqual(sequence.current_number, 6)

    def test_sequence_row_inserted_once(self):
        with mock.patch('invoicing.sales.numbering._create_sequence', wraps=_create_sequence) as create:
            numbers = [allocate_number(self.company, 'invoice') for _ in range(4)]

        self.assertEqual(create.call_count, 1)
        self.assertEqual(len(set(numbers)), 4)
        self.assertEqual(numbers[-1], f'INV-{self.year}-004')

    def test_unknown_sequence_type(self):
        with self.assertRaises(ValueError):
            allocate_number(self.company, 'receipt')

    def test_no_duplicate_numbers(self):
        customer = TestDataFactory.create_customer(self.company)
        numbers = [TestDataFactory.create_invoice(self.company, customer).invoice_number for _ in range(5)]
        self.assertEqual(len(set(numbers)), 5)


class DocumentServiceTests(TestCase):
    """Test document creation, updates and deletion"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.customer = TestDataFactory.create_customer(self.company)
        self.product = TestDataFactory.create_product(self.company, selling_price=Decimal('25000.00'))

    def test_create_invoice_sets_totals_and_balance(self):
        invoice = create_document(
            'invoice', self.company, self.customer,
            [TestDataFactory.line(self.product, Decimal('1'))],
            user=self.user,
        )
        self.assertEqual(invoice.subtotal, Decimal('25000.00'))
        self.assertEqual(invoice.vat_amount, Decimal('4000.00'))
        self.assertEqual(invoice.total, Decimal('29000.00'))
        self.assertEqual(invoice.balance_due, Decimal('29000.00'))
        self.assertEqual(invoice.amount_paid, Decimal('0.00'))
        self.assertEqual(invoice.payment_status, 'unpaid')
        self.assertEqual(invoice.status, 'draft')
        self.assertEqual(invoice.due_date, invoice.issue_date + timedelta(days=30))
        self.assertEqual(invoice.items.count(), 1)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('29000.00'))

    def test_header_total_matches_items(self):
        other = TestDataFactory.create_product(self.company, selling_price=Decimal('99.99'))
        quotation = create_document(
            'quotation', self.company, self.customer,
            [
                TestDataFactory.line(self.product, Decimal('1')),
                TestDataFactory.line(other, Decimal('3'), discount_percentage=Decimal('5')),
            ],
        )
        item_total = sum(item.line_total for item in quotation.items.all())
        self.assertEqual(quotation.total, item_total)
        self.assertEqual(quotation.valid_until, quotation.issue_date + timedelta(days=30))

    def test_quotation_does_not_touch_balance(self):
        TestDataFactory.create_quotation(self.company, self.customer)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))

    def test_exempt_customer_gets_zero_vat(self):
        exempt = TestDataFactory.create_customer(self.company, is_tax_exempt=True)
        invoice = create_document('invoice', self.company, exempt, [TestDataFactory.line(self.product)])
        self.assertEqual(invoice.vat_amount, Decimal('0.00'))
        self.assertEqual(invoice.total, Decimal('25000.00'))

    def test_failed_item_rolls_back_everything(self):
        with self.assertRaises(DocumentError):
            create_document(
                'invoice', self.company, self.customer,
                [
                    TestDataFactory.line(self.product, Decimal('1')),
                    {'product': 999999, 'quantity': Decimal('1')},
                ],
            )
        self.assertFalse(Invoice.objects.filter(company=self.company).exists())
        self.assertFalse(NumberSequence.objects.filter(company=self.company).exists())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))

    def test_empty_items_rejected(self):
        with self.assertRaises(DocumentError):
            create_document('quotation', self.company, self.customer, [])

    def test_product_from_other_company_rejected(self):
        foreign = TestDataFactory.create_product(TestDataFactory.create_company())
        with self.assertRaises(DocumentError):
            create_document('quotation', self.company, self.customer, [TestDataFactory.line(foreign)])

    def test_cannot_create_in_final_status(self):
        with self.assertRaises(StatusTransitionError):
            create_document(
                'invoice', self.company, self.customer, [TestDataFactory.line(self.product)], status='paid'
            )

    def test_update_replaces_items_and_adjusts_balance(self):
        invoice = create_document('invoice', self.company, self.customer, [TestDataFactory.line(self.product)])
        cheaper = TestDataFactory.create_product(self.company, selling_price=Decimal('1000.00'))

        invoice = update_document(invoice, {'items': [TestDataFactory.line(cheaper, Decimal('2'))]})

        self.assertEqual(invoice.items.count(), 1)
        self.assertEqual(invoice.total, Decimal('2320.00'))
        self.assertEqual(invoice.balance_due, Decimal('2320.00'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('2320.00'))

    def test_update_cannot_go_below_amount_paid(self):
        invoice = create_document('invoice', self.company, self.customer, [TestDataFactory.line(self.product)])
        record_payment(invoice, Decimal('10000.00'), 'cash')
        cheaper = TestDataFactory.create_product(self.company, selling_price=Decimal('10.00'))

        with self.assertRaises(DocumentError):
            update_document(invoice, {'items': [TestDataFactory.line(cheaper)]})

        invoice.refresh_from_db()
        self.assertEqual(invoice.total, Decimal('29000.00'))

    def test_update_rejects_status(self):
        quotation = TestDataFactory.create_quotation(self.company, self.customer)
        with self.assertRaises(DocumentError):
            update_document(quotation, {'status': 'accepted'})

    def test_converted_proforma_is_read_only(self):
        proforma = TestDataFactory.create_proforma(self.company, self.customer, status='sent')
        convert_proforma_to_invoice(proforma)
        proforma.refresh_from_db()
        with self.assertRaises(DocumentError):
            update_document(proforma, {'notes': 'changed'})

    def test_delete_invoice_reverses_balance(self):
        invoice = create_document('invoice', self.company, self.customer, [TestDataFactory.line(self.product)])
        delete_document(invoice)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))

    def test_delete_invoice_with_payments_rejected(self):
        invoice = create_document('invoice', self.company, self.customer, [TestDataFactory.line(self.product)])
        record_payment(invoice, Decimal('100.00'), 'mpesa')
        with self.assertRaises(DocumentError):
            delete_document(invoice)
        self.assertTrue(Invoice.objects.filter(pk=invoice.pk).exists())


class StatusTransitionTests(TestCase):
    """Test document status changes"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.customer = TestDataFactory.create_customer(self.company)

    def test_quotation_accept(self):
        quotation = TestDataFactory.create_quotation(self.company, self.customer)
        quotation = set_status(quotation, 'accepted')
        self.assertEqual(quotation.status, 'accepted')

    def test_invalid_status_value(self):
        quotation = TestDataFactory.create_quotation(self.company, self.customer)
        with self.assertRaises(StatusTransitionError):
            set_status(quotation, 'paid')

    def test_disallowed_transition(self):
        proforma = TestDataFactory.create_proforma(self.company, self.customer)
        with self.assertRaises(StatusTransitionError):
            set_status(proforma, 'converted')

    def test_cancel_invoice_releases_balance(self):
        invoice = TestDataFactory.create_invoice(self.company, self.customer)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('232.00'))

        invoice = set_status(invoice, 'cancelled')

        self.assertEqual(invoice.status, 'cancelled')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))

    def test_paid_invoice_cannot_be_cancelled(self):
        invoice = TestDataFactory.create_invoice(self.company, self.customer)
        record_payment(invoice, Decimal('232.00'), 'cash')
        invoice.refresh_from_db()
        with self.assertRaises(StatusTransitionError):
            set_status(invoice, 'cancelled')


class ConversionTests(TestCase):
    """Test quotation -> proforma -> invoice conversions"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.customer = TestDataFactory.create_customer(self.company)
        self.product = TestDataFactory.create_product(self.company, selling_price=Decimal('25000.00'))
        self.quotation = TestDataFactory.create_quotation(
            self.company, self.customer, [TestDataFactory.line(self.product)], user=self.user
        )

    def test_draft_quotation_cannot_convert(self):
        self.assertFalse(can_convert_quotation(self.quotation))
        self.assertEqual(conversion_options(self.quotation), [])
        with self.assertRaises(ConversionError):
            convert_quotation_to_proforma(self.quotation)
        self.assertFalse(ProformaInvoice.objects.exists())

    def test_expired_quotation_cannot_convert(self):
        set_status(self.quotation, 'accepted')
        self.quotation.refresh_from_db()
        later = self.quotation.valid_until + timedelta(days=1)
        self.assertFalse(can_convert_quotation(self.quotation, today=later))
        with self.assertRaises(ConversionError):
            convert_quotation_to_invoice(self.quotation, today=later)

    def test_accepted_quotation_to_proforma(self):
        set_status(self.quotation, 'accepted')
        self.quotation.refresh_from_db()
        self.assertTrue(can_convert_quotation(self.quotation))
        self.assertEqual(
            [option['action'] for option in conversion_options(self.quotation)],
            ['convert_to_proforma', 'convert_to_invoice']
        )

        proforma = convert_quotation_to_proforma(self.quotation, user=self.user)

        self.assertIsInstance(proforma, ProformaInvoice)
        self.assertEqual(proforma.proforma_number, f'PRO-{timezone.localdate().year}-001')
        self.assertEqual(proforma.status, 'draft')
        self.assertEqual(proforma.total, self.quotation.total)
        self.assertEqual(proforma.items.count(), self.quotation.items.count())
        self.assertIn(self.quotation.quote_number, proforma.notes)
        self.quotation.refresh_from_db()
        self.assertEqual(self.quotation.status, 'accepted')

    def test_accepted_quotation_to_invoice(self):
        set_status(self.quotation, 'accepted')
        self.quotation.refresh_from_db()

        invoice = convert_quotation_to_invoice(self.quotation, user=self.user)

        self.assertEqual(invoice.total, Decimal('29000.00'))
        self.assertEqual(invoice.balance_due, Decimal('29000.00'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('29000.00'))

    def test_sent_proforma_to_invoice(self):
        proforma = TestDataFactory.create_proforma(
            self.company, self.customer, [TestDataFactory.line(self.product)], status='sent'
        )
        self.assertTrue(can_convert_proforma(proforma))

        invoice = convert_proforma_to_invoice(proforma, user=self.user)

        self.assertEqual(invoice.total, proforma.total)
        proforma.refresh_from_db()
        self.assertEqual(proforma.status, 'converted')
        self.assertFalse(can_convert_proforma(proforma))
        with self.assertRaises(ConversionError):
            convert_proforma_to_invoice(proforma)
        self.assertEqual(Invoice.objects.filter(company=self.company).count(), 1)

    def test_draft_proforma_cannot_convert(self):
        proforma = TestDataFactory.create_proforma(self.company, self.customer)
        with self.assertRaises(ConversionError):
            convert_proforma_to_invoice(proforma)

    def test_wrong_source_type(self):
        proforma = TestDataFactory.create_proforma(self.company, self.customer, status='sent')
        with self.assertRaises(ConversionError):
            convert_quotation_to_invoice(proforma)

    def test_conversion_keeps_line_prices(self):
        set_status(self.quotation, 'accepted')
        self.quotation.refresh_from_db()
        self.product.selling_price = Decimal('1.00')
        self.product.save()

        invoice = convert_quotation_to_invoice(self.quotation)

        self.assertEqual(invoice.items.get().unit_price, Decimal('25000.00'))


class PaymentTests(TestCase):
    """Test payment recording"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.customer = TestDataFactory.create_customer(self.company)
        self.invoice = TestDataFactory.create_invoice(self.company, self.customer, status='sent')

    def test_partial_then_full_payment(self):
        payment, invoice = record_payment(self.invoice, Decimal('100.00'), 'mpesa', reference='QWE123')
        self.assertEqual(payment.customer, self.customer)
        self.assertEqual(invoice.amount_paid, Decimal('100.00'))
        self.assertEqual(invoice.balance_due, Decimal('132.00'))
        self.assertEqual(invoice.payment_status, 'partial')
        self.assertEqual(invoice.status, 'sent')

        payment, invoice = record_payment(invoice, Decimal('132.00'), 'cash')
        self.assertEqual(invoice.balance_due, Decimal('0.00'))
        self.assertEqual(invoice.payment_status, 'paid')
        self.assertEqual(invoice.status, 'paid')

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))

    def test_overpayment_rejected(self):
        with self.assertRaises(PaymentError):
            record_payment(self.invoice, Decimal('232.01'), 'cash')

    def test_invalid_amount_and_method(self):
        with self.assertRaises(PaymentError):
            record_payment(self.invoice, Decimal('0'), 'cash')
        with self.assertRaises(PaymentError):
            record_payment(self.invoice, Decimal('10'), 'bitcoin')

    def test_cancelled_invoice_rejects_payment(self):
        set_status(self.invoice, 'cancelled')
        with self.assertRaises(PaymentError):
            record_payment(self.invoice, Decimal('10.00'), 'cash')


class SalesAPITests(TestCase):
    """Test sales endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(self.company)
        self.product = TestDataFactory.create_product(self.company, selling_price=Decimal('25000.00'))

    def _payload(self, **extra):
        payload = {
            'customer': self.customer.id,
            'items': [{'product': self.product.id, 'quantity': '1'}],
        }
        payload.update(extra)
        return payload

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/invoices/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_invoice(self):
        response = self.client.post('/api/v1/invoices/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice_number'], f'INV-{timezone.localdate().year}-001')
        self.assertEqual(Decimal(response.data['total']), Decimal('29000.00'))
        self.assertEqual(len(response.data['items']), 1)
        self.assertTrue(AuditLog.objects.filter(action='invoice_create', company=self.company).exists())

    def test_create_without_items(self):
        response = self.client.post('/api/v1/quotations/', self._payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Quotation.objects.exists())

    def test_create_with_foreign_customer(self):
        foreign = TestDataFactory.create_customer(TestDataFactory.create_company())
        response = self.client.post('/api/v1/quotations/', self._payload(customer=foreign.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_with_unknown_product(self):
        response = self.client.post(
            '/api/v1/invoices/',
            self._payload(items=[{'product': 999999, 'quantity': '1'}]),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_list_is_scoped_to_company(self):
        TestDataFactory.create_quotation(self.company, self.customer)
        other_company = TestDataFactory.create_company()
        TestDataFactory.create_quotation(other_company, TestDataFactory.create_customer(other_company))

        response = self.client.get('/api/v1/quotations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_other_company_document_not_found(self):
        other_company = TestDataFactory.create_company()
        quotation = TestDataFactory.create_quotation(other_company, TestDataFactory.create_customer(other_company))
        response = self.client.get(f'/api/v1/quotations/{quotation.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_status_and_convert(self):
        quotation = TestDataFactory.create_quotation(self.company, self.customer)

        response = self.client.post(f'/api/v1/quotations/{quotation.id}/convert-to-invoice/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/quotations/{quotation.id}/status/', {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'accepted')

        response = self.client.get(f'/api/v1/quotations/{quotation.id}/conversion-options/')
        self.assertEqual(len(response.data['options']), 2)

        response = self.client.post(f'/api/v1/quotations/{quotation.id}/convert-to-proforma/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('proforma_number', response.data)
        self.assertTrue(AuditLog.objects.filter(action='document_convert').exists())

    def test_invalid_status_transition(self):
        invoice = TestDataFactory.create_invoice(self.company, self.customer)
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/status/', {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_record_payment(self):
        invoice = TestDataFactory.create_invoice(self.company, self.customer)
        response = self.client.post(
            f'/api/v1/invoices/{invoice.id}/payments/',
            {'amount': '232.00', 'method': 'mpesa', 'reference': 'ABC123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice']['status'], 'paid')
        self.assertEqual(Decimal(response.data['invoice']['balance_due']), Decimal('0.00'))

        response = self.client.get('/api/v1/payments/')
        self.assertEqual(response.data['count'], 1)

    def test_overpayment_returns_error(self):
        invoice = TestDataFactory.create_invoice(self.company, self.customer)
        response = self.client.post(
            f'/api/v1/invoices/{invoice.id}/payments/', {'amount': '500.00', 'method': 'cash'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_invoice_notes(self):
        invoice = TestDataFactory.create_invoice(self.company, self.customer)
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/', {'notes': 'Deliver Monday'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'Deliver Monday')

    def test_patch_due_date_before_stored_issue_date(self):
        today = timezone.localdate()
        invoice = TestDataFactory.create_invoice(self.company, self.customer, issue_date=today)
        response = self.client.patch(
            f'/api/v1/invoices/{invoice.id}/', {'due_date': (today - timedelta(days=1)).isoformat()}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('due_date', response.data)
        invoice.refresh_from_db()
        self.assertGreaterEqual(invoice.due_date, today)

    def test_number_sequences_require_staff(self):
        TestDataFactory.create_quotation(self.company, self.customer)
        sequence = NumberSequence.objects.get(company=self.company)

        response = self.client.get('/api/v1/number-sequences/')
        self.assertEqual(len(response.data), 1)

        response = self.client.patch(f'/api/v1/number-sequences/{sequence.id}/', {'prefix': 'QT'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ExpireDocumentsCommandTests(TestCase):
    """Test the expire_documents management command"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.customer = TestDataFactory.create_customer(self.company)
        past = timezone.localdate() - timedelta(days=40)
        self.stale_quotation = TestDataFactory.create_quotation(
            self.company, self.customer, issue_date=past, valid_until=past + timedelta(days=10)
        )
        self.fresh_quotation = TestDataFactory.create_quotation(self.company, self.customer)
        self.late_invoice = TestDataFactory.create_invoice(
            self.company, self.customer, status='sent', issue_date=past, due_date=past + timedelta(days=10)
        )

    def test_dry_run(self):
        out = StringIO()
        call_command('expire_documents', '--dry-run', stdout=out)
        self.stale_quotation.refresh_from_db()
        self.assertEqual(self.stale_quotation.status, 'draft')
        self.assertIn('Quotations to expire: 1', out.getvalue())

    def test_expires_and_flags_overdue(self):
        call_command('expire_documents', stdout=StringIO())
        self.stale_quotation.refresh_from_db()
        self.fresh_quotation.refresh_from_db()
        self.late_invoice.refresh_from_db()
        self.assertEqual(self.stale_quotation.status, 'expired')
        self.assertEqual(self.fresh_quotation.status, 'draft')
        self.assertEqual(self.late_invoice.status, 'overdue')
        self.assertTrue(self.late_invoice.is_overdue)

    def test_accepted_quotation_past_validity_expires(self):
        quotation = TestDataFactory.create_quotation(
            self.company, self.customer,
            issue_date=timezone.localdate() - timedelta(days=10), valid_until=timezone.localdate() - timedelta(days=3)
        )
        Quotation.objects.filter(pk=quotation.pk).update(status='accepted')

        call_command('expire_documents', stdout=StringIO())
        quotation.refresh_from_db()
        self.assertEqual(quotation.status, 'expired')

    def test_expires_on_last_valid_day(self):
        today = timezone.localdate()
        proforma = TestDataFactory.create_proforma(
            self.company, self.customer, issue_date=today - timedelta(days=5), valid_until=today, status='sent'
        )
        self.assertFalse(can_convert_proforma(proforma))

        call_command('expire_documents', stdout=StringIO())
        proforma.refresh_from_db()
        self.assertEqual(proforma.status, 'expired')
