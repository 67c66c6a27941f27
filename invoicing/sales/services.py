"""
Transactional write path for quotations, proformas, invoices and payments.

Each public function runs in a single ``transaction.atomic()`` block:
header, items, number sequence and customer balance either all change or
none of them do.
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from invoicing.core.conf import invoicing_setting
from invoicing.catalog.models import Product
from invoicing.parties.models import Customer
from invoicing.taxes.services import get_applicable_tax_rate
from .calculations import calculate_line, calculate_totals, serializable_taxes, to_decimal, ZERO
from .exceptions import DocumentError, PaymentError, StatusTransitionError
from .models import DOCUMENT_MODELS, Payment
from .numbering import allocate_number

logger = logging.getLogger(__name__)

HEADER_FIELDS = {
    'quotation': ['notes', 'terms', 'issue_date', 'valid_until', 'status'],
    'proforma': ['notes', 'terms', 'issue_date', 'valid_until', 'status'],
    'invoice': ['notes', 'terms', 'issue_date', 'due_date', 'status'],
}

# Statuses reachable through set_status; converted and paid are set by
# conversion and payments only.
STATUS_TRANSITIONS = {
    'quotation': {
        'draft': {'sent', 'accepted', 'rejected'},
        'sent': {'accepted', 'rejected', 'expired'},
        'accepted': {'expired'},
        'rejected': {'draft'},
        'expired': {'draft'},
    },
    'proforma': {
        'draft': {'sent', 'expired'},
        'sent': {'expired'},
        'converted': set(),
        'expired': set(),
    },
    'invoice': {
        'draft': {'sent', 'cancelled'},
        'sent': {'overdue', 'cancelled'},
        'overdue': {'cancelled'},
        'paid': set(),
        'cancelled': set(),
    },
}

CREATION_STATUSES = {'draft', 'sent'}


def adjust_customer_balance(customer, amount):
    """Add ``amount`` (may be negative) to the customer's running balance"""
    if not amount:
        return
    Customer.objects.filter(pk=customer.pk).update(
        current_balance=F('current_balance') + amount,
        updated_at=timezone.now(),
    )


def default_expiry(doc_type, issue_date):
    if doc_type == 'invoice':
        return issue_date + timedelta(days=invoicing_setting('PAYMENT_TERMS_DAYS'))
    return issue_date + timedelta(days=invoicing_setting('DOCUMENT_VALIDITY_DAYS'))


def _resolve_product(company, product):
    if isinstance(product, Product):
        if product.company_id != company.id:
            raise DocumentError(f"Product {product.pk} not found")
        return product
    try:
        return Product.objects.select_related('tax_configuration').get(pk=product, company=company)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise DocumentError(f"Product {product} not found")


def _write_items(document, items):
    """Insert item rows for ``document`` and set its header totals from them"""
    model, item_model, parent_field = DOCUMENT_MODELS[document.DOCUMENT_TYPE]
    lines = []
    for index, item in enumerate(items):
        product = _resolve_product(document.company, item.get('product'))

        unit_price = item.get('unit_price')
        if unit_price is None:
            unit_price = product.selling_price
        vat_rate = item.get('vat_rate')
        if vat_rate is None:
            vat_rate = get_applicable_tax_rate(
                document.company, product=product, customer=document.customer, on=document.issue_date
            )
        discount_percentage = item.get('discount_percentage') or ZERO

        try:
            amounts = calculate_line(
                item.get('quantity'), unit_price, discount_percentage, vat_rate, item.get('line_item_taxes') or ()
            )
        except ValueError as e:
            raise DocumentError(f"Line {index + 1}: {e}")

        item_model.objects.create(**{
            parent_field: document,
            'product': product,
            'description': item.get('description') or product.name,
            'quantity': to_decimal(item.get('quantity')),
            'unit_price': to_decimal(unit_price),
            'discount_percentage': to_decimal(discount_percentage),
            'discount_amount': amounts.discount_amount,
            'vat_rate': to_decimal(vat_rate),
            'vat_amount': amounts.vat_amount,
            'line_item_taxes': serializable_taxes(amounts.taxes),
            'additional_tax_amount': amounts.additional_tax_amount,
            'line_total': amounts.line_total,
            'sort_order': item.get('sort_order', index),
        })
        lines.append(amounts)

    totals = calculate_totals(lines)
    document.subtotal = totals.subtotal
    document.discount_amount = totals.discount_amount
    document.vat_amount = totals.vat_amount
    document.additional_tax_amount = totals.additional_tax_amount
    document.total = totals.total
    return totals


def _payment_status(invoice):
    if invoice.balance_due <= 0 and invoice.total > 0:
        return 'paid'
    if invoice.amount_paid > 0:
        return 'partial'
    return 'unpaid'


def create_document(doc_type, company, customer, items, user=None, **header):
    """
    Create a quotation, proforma or invoice with its items.

    A fresh number is allocated, amounts are computed from the items and,
    for invoices, the total is added to the customer's balance.
    """
    if doc_type not in DOCUMENT_MODELS:
        raise DocumentError(f"Unknown document type: {doc_type}")
    if not items:
        raise DocumentError('At least one line item is required')
    if customer.company_id != company.id:
        raise DocumentError('Customer not found')

    model = DOCUMENT_MODELS[doc_type][0]
    unknown = set(header) - set(HEADER_FIELDS[doc_type])
    if unknown:
        raise DocumentError(f"Unexpected fields: {', '.join(sorted(unknown))}")
    status = header.pop('status', None) or 'draft'
    if status not in CREATION_STATUSES:
        raise StatusTransitionError(f"A new {doc_type} cannot start as {status}")

    issue_date = header.pop('issue_date', None) or timezone.localdate()
    expiry_field = 'due_date' if doc_type == 'invoice' else 'valid_until'
    if not header.get(expiry_field):
        header[expiry_field] = default_expiry(doc_type, issue_date)

    with transaction.atomic():
        number = allocate_number(company, doc_type, issue_date)
        document = model(
            company=company,
            customer=customer,
            created_by=user,
            issue_date=issue_date,
            status=status,
            **{model.NUMBER_FIELD: number},
            **header
        )
        if doc_type == 'invoice':
            document.amount_paid = ZERO
            document.etims_status = 'pending'
        document.save()

        _write_items(document, items)
        if doc_type == 'invoice':
            document.balance_due = document.total
            document.payment_status = 'unpaid'
        document.save()

        if doc_type == 'invoice':
            adjust_customer_balance(customer, document.total)

    logger.info(f"Created {doc_type} {number} for customer {customer.id} (total {document.total})")
    return document


def is_read_only(document):
    if document.DOCUMENT_TYPE == 'invoice':
        return document.status in ('paid', 'cancelled')
    if document.DOCUMENT_TYPE == 'proforma':
        return document.status == 'converted'
    return False


def update_document(document, data, user=None):
    """Update header fields and, when ``items`` is given, replace every line"""
    doc_type = document.DOCUMENT_TYPE
    model = DOCUMENT_MODELS[doc_type][0]
    data = dict(data)
    items = data.pop('items', None)
    new_customer = data.pop('customer', None)

    if items is not None and not items:
        raise DocumentError('At least one line item is required')
    if 'status' in data:
        raise DocumentError('Use the status endpoint to change the status')
    unknown = set(data) - set(HEADER_FIELDS[doc_type])
    if unknown:
        raise DocumentError(f"Unexpected fields: {', '.join(sorted(unknown))}")

    with transaction.atomic():
        document = model.objects.select_for_update().select_related('company', 'customer').get(pk=document.pk)
        if is_read_only(document):
            raise DocumentError(f"{document.get_status_display()} {doc_type}s cannot be edited")

        old_customer = document.customer
        old_balance_due = document.balance_due if doc_type == 'invoice' else None

        for field, value in data.items():
            setattr(document, field, value)
        if new_customer is not None and new_customer.pk != old_customer.pk:
            if new_customer.company_id != document.company_id:
                raise DocumentError('Customer not found')
            if doc_type == 'invoice' and document.amount_paid > 0:
                raise DocumentError('The customer of an invoice with payments cannot be changed')
            document.customer = new_customer

        if items is not None:
            DOCUMENT_MODELS[doc_type][1].objects.filter(**{DOCUMENT_MODELS[doc_type][2]: document}).delete()
            _write_items(document, items)

        if doc_type == 'invoice':
            if document.total < document.amount_paid:
                raise DocumentError(
                    f"Invoice total {document.total} cannot be lower than the amount already paid ({document.amount_paid})"
                )
            document.balance_due = document.total - document.amount_paid
            document.payment_status = _payment_status(document)

        document.save()

        if doc_type == 'invoice':
            if document.customer.pk != old_customer.pk:
                adjust_customer_balance(old_customer, -old_balance_due)
                adjust_customer_balance(document.customer, document.balance_due)
            else:
                adjust_customer_balance(document.customer, document.balance_due - old_balance_due)

    logger.info(f"Updated {doc_type} {document.number}")
    return document


def delete_document(document):
    doc_type = document.DOCUMENT_TYPE
    number = document.number
    with transaction.atomic():
        if doc_type == 'invoice':
            if document.payments.exists():
                raise DocumentError('Invoices with payments cannot be deleted, cancel the invoice instead')
            if document.status != 'cancelled':
                adjust_customer_balance(document.customer, -document.balance_due)
        document.delete()
    logger.info(f"Deleted {doc_type} {number}")


def set_status(document, new_status, user=None):
    """Move ``document`` to ``new_status`` when the transition is allowed"""
    doc_type = document.DOCUMENT_TYPE
    model = DOCUMENT_MODELS[doc_type][0]
    valid = dict(model.STATUS_CHOICES)
    if new_status not in valid:
        raise StatusTransitionError(f"Invalid status: {new_status}")

    with transaction.atomic():
        document = model.objects.select_for_update().select_related('customer').get(pk=document.pk)
        old_status = document.status
        if old_status == new_status:
            return document
        if new_status not in STATUS_TRANSITIONS[doc_type].get(old_status, set()):
            raise StatusTransitionError(
                f"Cannot change {doc_type} status from {old_status} to {new_status}"
            )

        if doc_type == 'invoice' and new_status == 'cancelled':
            adjust_customer_balance(document.customer, -document.balance_due)

        document.status = new_status
        document.save(update_fields=['status', 'updated_at'])

    logger.info(f"{doc_type.capitalize()} {document.number} status {old_status} -> {new_status}")
    return document


def record_payment(invoice, amount, method, reference='', notes='', user=None, payment_date=None):
    """Record a payment and roll it into the invoice and customer balances"""
    amount = to_decimal(amount, 'amount')
    if amount <= 0:
        raise PaymentError('Payment amount must be greater than zero')
    if method not in dict(Payment.METHOD_CHOICES):
        raise PaymentError(f"Invalid payment method: {method}")

    with transaction.atomic():
        invoice = type(invoice).objects.select_for_update().select_related('customer').get(pk=invoice.pk)
        if invoice.status == 'cancelled':
            raise PaymentError('Cannot record a payment on a cancelled invoice')
        if invoice.balance_due <= 0:
            raise PaymentError('Invoice is already fully paid')
        if amount > invoice.balance_due:
            raise PaymentError(f"Payment amount {amount} exceeds the balance due ({invoice.balance_due})")

        payment = Payment.objects.create(
            company_id=invoice.company_id,
            invoice=invoice,
            customer=invoice.customer,
            amount=amount,
            method=method,
            reference=reference or '',
            notes=notes or '',
            payment_date=payment_date or timezone.localdate(),
            created_by=user if user is not None and user.is_authenticated else None,
        )

        invoice.amount_paid += amount
        invoice.balance_due -= amount
        invoice.payment_status = _payment_status(invoice)
        if invoice.payment_status == 'paid':
            invoice.status = 'paid'
        invoice.save(update_fields=['amount_paid', 'balance_due', 'payment_status', 'status', 'updated_at'])

        adjust_customer_balance(invoice.customer, -amount)

    logger.info(f"Payment {payment.id} of {amount} recorded on invoice {invoice.invoice_number} via {method}")
    return payment, invoice

