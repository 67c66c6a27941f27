import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import Quotation, ProformaInvoice, Invoice, Payment, NumberSequence
from .serializers import (
    QuotationSerializer, ProformaInvoiceSerializer, InvoiceSerializer, PaymentSerializer,
    QuotationWriteSerializer, ProformaWriteSerializer, InvoiceWriteSerializer,
    StatusUpdateSerializer, PaymentCreateSerializer, NumberSequenceSerializer
)
from .exceptions import DocumentError
from .services import create_document, update_document, delete_document, set_status, record_payment
from .conversion import (
    conversion_options, convert_quotation_to_proforma,
    convert_quotation_to_invoice, convert_proforma_to_invoice
)
from invoicing.core.utils import create_audit_log, get_request_company, paginated_response

logger = logging.getLogger(__name__)

DOCUMENTS = {
    'quotation': {
        'model': Quotation,
        'serializer': QuotationSerializer,
        'write_serializer': QuotationWriteSerializer,
        'model_name': 'Quotation',
        'create_action': 'quotation_create',
        'update_action': 'update',
    },
    'proforma': {
        'model': ProformaInvoice,
        'serializer': ProformaInvoiceSerializer,
        'write_serializer': ProformaWriteSerializer,
        'model_name': 'ProformaInvoice',
        'create_action': 'proforma_create',
        'update_action': 'update',
    },
    'invoice': {
        'model': Invoice,
        'serializer': InvoiceSerializer,
        'write_serializer': InvoiceWriteSerializer,
        'model_name': 'Invoice',
        'create_action': 'invoice_create',
        'update_action': 'invoice_update',
    },
}


def _document_queryset(doc_type, company):
    model = DOCUMENTS[doc_type]['model']
    queryset = model.objects.select_related('customer', 'created_by').prefetch_related('items__product')
    if doc_type == 'invoice':
        queryset = queryset.prefetch_related('payments')
    return queryset.filter(company=company)


def _get_document(doc_type, company, pk):
    return get_object_or_404(_document_queryset(doc_type, company), pk=pk)


def _reload(document):
    return _document_queryset(document.DOCUMENT_TYPE, document.company).get(pk=document.pk)


def _error(message, http_status=status.HTTP_400_BAD_REQUEST):
    return Response({'error': message}, status=http_status)


def _document_list_create(request, doc_type):
    config = DOCUMENTS[doc_type]
    company = get_request_company(request)

    if request.method == 'GET':
        model = config['model']
        queryset = _document_queryset(doc_type, company)

        status_filter = request.query_params.get('status', None)
        customer_id = request.query_params.get('customer', None)
        search = request.query_params.get('search', None)
        date_from = request.query_params.get('date_from', None)
        date_to = request.query_params.get('date_to', None)

        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if customer_id:
            queryset = queryset.filter(customer_id=customer_id)
        if search:
            queryset = queryset.filter(
                Q(**{f'{model.NUMBER_FIELD}__icontains': search}) |
                Q(customer__name__icontains=search)
            )
        if date_from:
            queryset = queryset.filter(issue_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(issue_date__lte=date_to)
        if doc_type == 'invoice':
            payment_status = request.query_params.get('payment_status', None)
            if payment_status:
                queryset = queryset.filter(payment_status=payment_status)

        return paginated_response(request, queryset.order_by('-created_at', '-id'), config['serializer'])

    serializer = config['write_serializer'](data=request.data, context={'company': company})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    customer = data.pop('customer')
    items = data.pop('items')
    try:
        document = create_document(doc_type, company, customer, items, user=request.user, **data)
    except DocumentError as e:
        logger.warning(f"{config['model_name']} creation rejected: {str(e)}")
        return _error(str(e))

    create_audit_log(
        request=request,
        action=config['create_action'],
        model_name=config['model_name'],
        object_id=document.id,
        object_reference=document.number,
        changes={'customer': customer.name, 'total': str(document.total), 'items': len(items)},
        company=company,
    )
    return Response(config['serializer'](_reload(document)).data, status=status.HTTP_201_CREATED)


def _document_detail(request, doc_type, pk):
    config = DOCUMENTS[doc_type]
    company = get_request_company(request)
    document = _get_document(doc_type, company, pk)

    if request.method == 'GET':
        return Response(config['serializer'](document).data)

    if request.method == 'DELETE':
        number = document.number
        try:
            delete_document(document)
        except DocumentError as e:
            return _error(str(e))
        create_audit_log(
            request=request,
            action='delete',
            model_name=config['model_name'],
            object_id=pk,
            object_reference=number,
            company=company,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = config['write_serializer'](
        document, data=request.data, partial=request.method == 'PATCH', context={'company': company}
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    data.pop('status', None)
    old_total = document.total
    try:
        document = update_document(document, data, user=request.user)
    except DocumentError as e:
        return _error(str(e))

    create_audit_log(
        request=request,
        action=config['update_action'],
        model_name=config['model_name'],
        object_id=document.id,
        object_reference=document.number,
        changes={'total': {'old': str(old_total), 'new': str(document.total)}} if old_total != document.total else {},
        company=company,
    )
    return Response(config['serializer'](_reload(document)).data)


def _document_status(request, doc_type, pk):
    config = DOCUMENTS[doc_type]
    company = get_request_company(request)
    document = _get_document(doc_type, company, pk)

    serializer = StatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = document.status
    new_status = serializer.validated_data['status']
    try:
        document = set_status(document, new_status, user=request.user)
    except DocumentError as e:
        return _error(str(e))

    action = 'invoice_cancel' if doc_type == 'invoice' and new_status == 'cancelled' else 'status_change'
    create_audit_log(
        request=request,
        action=action,
        model_name=config['model_name'],
        object_id=document.id,
        object_reference=document.number,
        changes={'status': {'old': old_status, 'new': document.status}},
        company=company,
    )
    return Response(config['serializer'](_reload(document)).data)


def _document_conversion_options(request, doc_type, pk):
    company = get_request_company(request)
    document = _get_document(doc_type, company, pk)
    return Response({'options': conversion_options(document)})


def _document_convert(request, doc_type, pk, converter):
    config = DOCUMENTS[doc_type]
    company = get_request_company(request)
    source = _get_document(doc_type, company, pk)

    try:
        target = converter(source, user=request.user)
    except DocumentError as e:
        return _error(str(e))

    create_audit_log(
        request=request,
        action='document_convert',
        model_name=config['model_name'],
        object_id=source.id,
        object_reference=source.number,
        changes={'from': source.number, 'to': target.number, 'target_type': target.DOCUMENT_TYPE},
        company=company,
    )
    target_serializer = DOCUMENTS[target.DOCUMENT_TYPE]['serializer']
    return Response(target_serializer(_reload(target)).data, status=status.HTTP_201_CREATED)


# Quotation views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def quotation_list_create(request):
    """List all quotations or create a new quotation"""
    return _document_list_create(request, 'quotation')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def quotation_detail(request, pk):
    """Retrieve, update or delete a quotation"""
    return _document_detail(request, 'quotation', pk)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def quotation_status(request, pk):
    """Change the status of a quotation"""
    return _document_status(request, 'quotation', pk)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quotation_conversion_options(request, pk):
    return _document_conversion_options(request, 'quotation', pk)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quotation_convert_to_proforma(request, pk):
    """Create a proforma invoice from an accepted quotation"""
    return _document_convert(request, 'quotation', pk, convert_quotation_to_proforma)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quotation_convert_to_invoice(request, pk):
    """Create an invoice directly from an accepted quotation"""
    return _document_convert(request, 'quotation', pk, convert_quotation_to_invoice)


# Proforma invoice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def proforma_list_create(request):
    """List all proforma invoices or create a new one"""
    return _document_list_create(request, 'proforma')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def proforma_detail(request, pk):
    """Retrieve, update or delete a proforma invoice"""
    return _document_detail(request, 'proforma', pk)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def proforma_status(request, pk):
    """Change the status of a proforma invoice"""
    return _document_status(request, 'proforma', pk)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def proforma_conversion_options(request, pk):
    return _document_conversion_options(request, 'proforma', pk)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def proforma_convert_to_invoice(request, pk):
    """Create an invoice from a sent proforma and mark the proforma converted"""
    return _document_convert(request, 'proforma', pk, convert_proforma_to_invoice)


# Invoice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List all invoices or create a new invoice"""
    return _document_list_create(request, 'invoice')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    """Retrieve, update or delete an invoice"""
    return _document_detail(request, 'invoice', pk)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def invoice_status(request, pk):
    """Change the status of an invoice; cancelling releases the customer balance"""
    return _document_status(request, 'invoice', pk)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_payments(request, pk):
    """List payments of an invoice or record a new one"""
    company = get_request_company(request)
    invoice = get_object_or_404(Invoice, pk=pk, company=company)

    if request.method == 'GET':
        payments = invoice.payments.select_related('invoice', 'customer').order_by('-payment_date', '-id')
        return Response(PaymentSerializer(payments, many=True).data)

    serializer = PaymentCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        payment, invoice = record_payment(
            invoice,
            data['amount'],
            data['method'],
            reference=data.get('reference', ''),
            notes=data.get('notes', ''),
            user=request.user,
            payment_date=data.get('payment_date'),
        )
    except DocumentError as e:
        return _error(str(e))

    create_audit_log(
        request=request,
        action='payment_add',
        model_name='Invoice',
        object_id=invoice.id,
        object_reference=invoice.invoice_number,
        changes={
            'amount': str(payment.amount),
            'method': payment.method,
            'amount_paid': str(invoice.amount_paid),
            'balance_due': str(invoice.balance_due),
        },
        company=company,
    )
    return Response({
        'payment': PaymentSerializer(payment).data,
        'invoice': InvoiceSerializer(_reload(invoice)).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_list(request):
    """All payments received by the company"""
    company = get_request_company(request)
    payments = Payment.objects.select_related('invoice', 'customer').filter(company=company)

    method = request.query_params.get('method', None)
    customer_id = request.query_params.get('customer', None)
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)

    if method:
        payments = payments.filter(method=method)
    if customer_id:
        payments = payments.filter(customer_id=customer_id)
    if date_from:
        payments = payments.filter(payment_date__gte=date_from)
    if date_to:
        payments = payments.filter(payment_date__lte=date_to)

    return paginated_response(request, payments.order_by('-payment_date', '-id'), PaymentSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_detail(request, pk):
    company = get_request_company(request)
    payment = get_object_or_404(Payment.objects.select_related('invoice', 'customer'), pk=pk, company=company)
    return Response(PaymentSerializer(payment).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def number_sequence_list(request):
    """Number sequences configured for the company"""
    company = get_request_company(request)
    sequences = NumberSequence.objects.filter(company=company).order_by('sequence_type')
    return Response(NumberSequenceSerializer(sequences, many=True).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def number_sequence_detail(request, pk):
    """Change prefix, padding or next number of a sequence"""
    company = get_request_company(request)
    sequence = get_object_or_404(NumberSequence, pk=pk, company=company)
    if not (request.user.is_staff or request.user.is_superuser):
        return _error('Only administrators can change number sequences', status.HTTP_403_FORBIDDEN)

    serializer = NumberSequenceSerializer(sequence, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='NumberSequence',
            object_id=sequence.id,
            object_reference=sequence.sequence_type,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
            company=company,
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
