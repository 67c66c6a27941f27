from django.db import models
from django.utils import timezone
from decimal import Decimal
from invoicing.core.models import Company, User
from invoicing.catalog.models import Product
from invoicing.parties.models import Customer


class NumberSequence(models.Model):
    """Per-company counter behind quotation, proforma and invoice numbers"""
    SEQUENCE_TYPE_CHOICES = [
        ('quotation', 'Quotation'),
        ('proforma', 'Proforma Invoice'),
        ('invoice', 'Invoice'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='number_sequences')
    sequence_type = models.CharField(max_length=20, choices=SEQUENCE_TYPE_CHOICES)
    prefix = models.CharField(max_length=10)
    current_number = models.PositiveIntegerField(default=1)  # next number to issue
    padding_length = models.PositiveSmallIntegerField(default=3)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.company_id}:{self.sequence_type} -> {self.current_number}"

    class Meta:
        db_table = 'number_sequences'
        constraints = [
            models.UniqueConstraint(fields=['company', 'sequence_type'], name='uniq_sequence_company_type'),
        ]


class SalesDocument(models.Model):
    """Header fields shared by quotations, proformas and invoices"""
    DOCUMENT_TYPE = None
    NUMBER_FIELD = None

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    additional_tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    issue_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True)
    terms = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def number(self):
        return getattr(self, self.NUMBER_FIELD)

    def __str__(self):
        return self.number

    class Meta:
        abstract = True


class DocumentItem(models.Model):
    """Line fields shared by every document item table"""
    description = models.TextField(blank=True)
    quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('1.000'))
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    line_item_taxes = models.JSONField(default=list, blank=True)  # [{"name", "rate", "is_compound", "amount"}]
    additional_tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    line_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ['sort_order', 'id']


class Quotation(SalesDocument):
    """Quotations"""
    DOCUMENT_TYPE = 'quotation'
    NUMBER_FIELD = 'quote_number'

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
        ('expired', 'Expired'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='quotations')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='quotations')
    quote_number = models.CharField(max_length=50, db_index=True)
    valid_until = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='quotations')

    class Meta:
        db_table = 'quotations'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['company', 'quote_number'], name='uniq_quotation_company_number'),
        ]


class QuotationItem(DocumentItem):
    """Quotation items"""
    quotation = models.ForeignKey(Quotation, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='quotation_items')

    class Meta(DocumentItem.Meta):
        db_table = 'quotation_items'


class ProformaInvoice(SalesDocument):
    """Proforma invoices"""
    DOCUMENT_TYPE = 'proforma'
    NUMBER_FIELD = 'proforma_number'

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('converted', 'Converted'),
        ('expired', 'Expired'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='proforma_invoices')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='proforma_invoices')
    proforma_number = models.CharField(max_length=50, db_index=True)
    valid_until = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='proforma_invoices')

    class Meta:
        db_table = 'proforma_invoices'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['company', 'proforma_number'], name='uniq_proforma_company_number'),
        ]


class ProformaItem(DocumentItem):
    """Proforma invoice items"""
    proforma = models.ForeignKey(ProformaInvoice, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='proforma_items')

    class Meta(DocumentItem.Meta):
        db_table = 'proforma_items'


class Invoice(SalesDocument):
    """Invoices"""
    DOCUMENT_TYPE = 'invoice'
    NUMBER_FIELD = 'invoice_number'

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]

    PAYMENT_STATUS_CHOICES = [
        ('unpaid', 'Unpaid'),
        ('partial', 'Partially Paid'),
        ('paid', 'Paid'),
    ]

    ETIMS_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('submitted', 'Submitted'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='invoices')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='invoices')
    invoice_number = models.CharField(max_length=50, db_index=True)
    due_date = models.DateField()
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    balance_due = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='unpaid')
    etims_status = models.CharField(max_length=20, choices=ETIMS_STATUS_CHOICES, default='pending')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')

    @property
    def is_overdue(self):
        return self.status in ('sent', 'overdue') and self.balance_due > 0 and self.due_date < timezone.localdate()

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['company', 'invoice_number'], name='uniq_invoice_company_number'),
        ]
        indexes = [
            models.Index(fields=['company', 'status'], name='idx_invoice_company_status'),
            models.Index(fields=['due_date'], name='idx_invoice_due_date'),
        ]


class InvoiceItem(DocumentItem):
    """Invoice items"""
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='invoice_items')

    class Meta(DocumentItem.Meta):
        db_table = 'invoice_items'


class Payment(models.Model):
    """Payments received against invoices"""
    METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('mpesa', 'M-Pesa'),
        ('bank', 'Bank Transfer'),
        ('cheque', 'Cheque'),
        ('card', 'Card'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='payments')
    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name='payments')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='payments')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='cash')
    reference = models.CharField(max_length=100, blank=True)
    payment_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_method_display()} {self.amount} - {self.invoice.invoice_number}"

    class Meta:
        db_table = 'payments'
        ordering = ['-payment_date', '-id']


DOCUMENT_MODELS = {
    'quotation': (Quotation, QuotationItem, 'quotation'),
    'proforma': (ProformaInvoice, ProformaItem, 'proforma'),
    'invoice': (Invoice, InvoiceItem, 'invoice'),
}
