from django.contrib import admin
from .models import (
    NumberSequence, Quotation, QuotationItem, ProformaInvoice, ProformaItem,
    Invoice, InvoiceItem, Payment
)


class QuotationItemInline(admin.TabularInline):
    model = QuotationItem
    extra = 0
    readonly_fields = ['discount_amount', 'vat_amount', 'additional_tax_amount', 'line_total']


class ProformaItemInline(admin.TabularInline):
    model = ProformaItem
    extra = 0
    readonly_fields = ['discount_amount', 'vat_amount', 'additional_tax_amount', 'line_total']


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ['discount_amount', 'vat_amount', 'additional_tax_amount', 'line_total']


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ['amount', 'method', 'reference', 'payment_date', 'created_by', 'created_at']


@admin.register(NumberSequence)
class NumberSequenceAdmin(admin.ModelAdmin):
    list_display = ['company', 'sequence_type', 'prefix', 'current_number', 'padding_length', 'updated_at']
    list_filter = ['sequence_type', 'company']


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ['quote_number', 'customer', 'company', 'status', 'total', 'issue_date', 'valid_until']
    list_filter = ['status', 'company', 'issue_date']
    search_fields = ['quote_number', 'customer__name']
    readonly_fields = ['subtotal', 'discount_amount', 'vat_amount', 'additional_tax_amount', 'total', 'created_at', 'updated_at']
    inlines = [QuotationItemInline]


@admin.register(ProformaInvoice)
class ProformaInvoiceAdmin(admin.ModelAdmin):
    list_display = ['proforma_number', 'customer', 'company', 'status', 'total', 'issue_date', 'valid_until']
    list_filter = ['status', 'company', 'issue_date']
    search_fields = ['proforma_number', 'customer__name']
    readonly_fields = ['subtotal', 'discount_amount', 'vat_amount', 'additional_tax_amount', 'total', 'created_at', 'updated_at']
    inlines = [ProformaItemInline]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'customer', 'company', 'status', 'payment_status', 'total', 'balance_due', 'due_date', 'etims_status']
    list_filter = ['status', 'payment_status', 'etims_status', 'company', 'issue_date']
    search_fields = ['invoice_number', 'customer__name']
    readonly_fields = [
        'subtotal', 'discount_amount', 'vat_amount', 'additional_tax_amount', 'total',
        'amount_paid', 'balance_due', 'created_at', 'updated_at'
    ]
    inlines = [InvoiceItemInline, PaymentInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['invoice', 'customer', 'amount', 'method', 'reference', 'payment_date', 'created_by']
    list_filter = ['method', 'payment_date', 'company']
    search_fields = ['invoice__invoice_number', 'customer__name', 'reference']
    readonly_fields = ['created_at']
