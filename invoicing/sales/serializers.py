from decimal import Decimal
from rest_framework import serializers
from invoicing.parties.models import Customer
from .models import (
    Quotation, QuotationItem, ProformaInvoice, ProformaItem,
    Invoice, InvoiceItem, Payment, NumberSequence
)

ITEM_FIELDS = [
    'id', 'product', 'product_name', 'product_sku', 'description', 'quantity', 'unit_price',
    'discount_percentage', 'discount_amount', 'vat_rate', 'vat_amount', 'line_item_taxes',
    'additional_tax_amount', 'line_total', 'sort_order'
]

DOCUMENT_FIELDS = [
    'id', 'customer', 'customer_name', 'subtotal', 'discount_amount', 'vat_amount',
    'additional_tax_amount', 'total', 'status', 'issue_date', 'notes', 'terms',
    'created_by', 'created_by_username', 'created_at', 'updated_at'
]


class QuotationItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = QuotationItem
        fields = ITEM_FIELDS


class ProformaItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = ProformaItem
        fields = ITEM_FIELDS


class InvoiceItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = InvoiceItem
        fields = ITEM_FIELDS


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'invoice', 'invoice_number', 'customer', 'customer_name', 'amount', 'method',
            'reference', 'payment_date', 'notes', 'created_by', 'created_at'
        ]


class QuotationSerializer(serializers.ModelSerializer):
    items = QuotationItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = Quotation
        fields = ['quote_number', 'valid_until'] + DOCUMENT_FIELDS + ['items']


class ProformaInvoiceSerializer(serializers.ModelSerializer):
    items = ProformaItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = ProformaInvoice
        fields = ['proforma_number', 'valid_until'] + DOCUMENT_FIELDS + ['items']


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'invoice_number', 'due_date', 'amount_paid', 'balance_due', 'payment_status',
            'etims_status', 'is_overdue'
        ] + DOCUMENT_FIELDS + ['items', 'payments']


class LineTaxSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'))
    is_compound = serializers.BooleanField(default=False)


class LineItemInputSerializer(serializers.Serializer):
    """One line of a document create / update payload"""
    product = serializers.IntegerField()
    description = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=Decimal('0'),
        min_value=Decimal('0'), max_value=Decimal('100')
    )
    vat_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True,
        min_value=Decimal('0'), max_value=Decimal('100')
    )
    line_item_taxes = LineTaxSerializer(many=True, required=False)
    sort_order = serializers.IntegerField(required=False, min_value=0)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero')
        return value

    def validate_unit_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError('Unit price cannot be negative')
        return value


class DocumentWriteSerializer(serializers.Serializer):
    """Create / update payload shared by every document type"""
    EXPIRY_FIELD = None

    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())
    issue_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    terms = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=['draft', 'sent'], required=False)
    items = LineItemInputSerializer(many=True, allow_empty=False)

    def validate_customer(self, value):
        company = self.context.get('company')
        if company is not None and value.company_id != company.id:
            raise serializers.ValidationError('Customer not found')
        if not value.is_active:
            raise serializers.ValidationError('Customer is inactive')
        return value

    def validate(self, attrs):
        expiry = attrs.get(self.EXPIRY_FIELD, getattr(self.instance, self.EXPIRY_FIELD, None))
        issue_date = attrs.get('issue_date', getattr(self.instance, 'issue_date', None))
        if expiry and issue_date and expiry < issue_date:
            raise serializers.ValidationError({self.EXPIRY_FIELD: 'Date cannot be before the issue date'})
        return attrs


class QuotationWriteSerializer(DocumentWriteSerializer):
    EXPIRY_FIELD = 'valid_until'
    valid_until = serializers.DateField(required=False)


class ProformaWriteSerializer(DocumentWriteSerializer):
    EXPIRY_FIELD = 'valid_until'
    valid_until = serializers.DateField(required=False)


class InvoiceWriteSerializer(DocumentWriteSerializer):
    EXPIRY_FIELD = 'due_date'
    due_date = serializers.DateField(required=False)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    payment_date = serializers.DateField(required=False)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Payment amount must be greater than zero')
        return value


class NumberSequenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = NumberSequence
        fields = ['id', 'sequence_type', 'prefix', 'current_number', 'padding_length', 'updated_at']
        read_only_fields = ['sequence_type', 'updated_at']

    def validate_current_number(self, value):
        if value < 1:
            raise serializers.ValidationError('Sequence numbers start at 1')
        return value
