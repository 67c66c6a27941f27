"""
Quotation -> proforma -> invoice conversion.

A conversion creates a brand new document with its own number and an
identical set of lines; amounts are recomputed from those lines. The
target keeps no foreign key to its source, only a note naming it.
"""
import logging

from django.db import transaction
from django.utils import timezone

from .exceptions import ConversionError
from .models import Quotation, ProformaInvoice
from .services import create_document

logger = logging.getLogger(__name__)

REQUIRED_STATUS = {
    'quotation': 'accepted',
    'proforma': 'sent',
}


def conversion_blockers(document, today=None):
    """Human readable reasons ``document`` cannot be converted; empty when it can"""
    today = today or timezone.localdate()
    doc_type = document.DOCUMENT_TYPE
    required = REQUIRED_STATUS.get(doc_type)
    if required is None:
        return [f"{doc_type.capitalize()}s cannot be converted"]

    blockers = []
    if document.status != required:
        blockers.append(f"{doc_type.capitalize()} status must be '{required}' (currently '{document.status}')")
    if document.valid_until is None or document.valid_until <= today:
        blockers.append(f"{doc_type.capitalize()} validity has expired")
    if not document.items.exists():
        blockers.append(f"{doc_type.capitalize()} has no line items")
    return blockers


def can_convert_quotation(quotation, today=None):
    return not conversion_blockers(quotation, today)


def can_convert_proforma(proforma, today=None):
    return not conversion_blockers(proforma, today)


def conversion_options(document, today=None):
    """Conversions currently offered for ``document``"""
    if document.DOCUMENT_TYPE == 'quotation' and can_convert_quotation(document, today):
        return [
            {
                'action': 'convert_to_proforma',
                'label': 'Convert to Proforma',
                'description': 'Create a proforma invoice for advance billing',
            },
            {
                'action': 'convert_to_invoice',
                'label': 'Convert to Invoice',
                'description': 'Create a formal invoice directly',
            },
        ]
    if document.DOCUMENT_TYPE == 'proforma' and can_convert_proforma(document, today):
        return [
            {
                'action': 'convert_to_invoice',
                'label': 'Convert to Invoice',
                'description': 'Create a formal invoice from this proforma',
            },
        ]
    return []


def _copy_items(source):
    return [
        {
            'product': item.product,
            'description': item.description,
            'quantity': item.quantity,
            'unit_price': item.unit_price,
            'discount_percentage': item.discount_percentage,
            'vat_rate': item.vat_rate,
            'line_item_taxes': item.line_item_taxes,
            'sort_order': item.sort_order,
        }
        for item in source.items.select_related('product').order_by('sort_order', 'id')
    ]


def _convert(source, target_type, user=None, today=None):
    model = type(source)
    with transaction.atomic():
        source = model.objects.select_for_update().select_related('company', 'customer').get(pk=source.pk)
        blockers = conversion_blockers(source, today)
        if blockers:
            raise ConversionError('; '.join(blockers))

        target = create_document(
            target_type,
            source.company,
            source.customer,
            _copy_items(source),
            user=user,
            notes=f"Converted from {source.DOCUMENT_TYPE} {source.number}",
            terms=source.terms,
        )

        if source.DOCUMENT_TYPE == 'proforma':
            source.status = 'converted'
            source.save(update_fields=['status', 'updated_at'])

    logger.info(f"Converted {source.DOCUMENT_TYPE} {source.number} to {target_type} {target.number}")
    return target


def convert_quotation_to_proforma(quotation, user=None, today=None):
    if not isinstance(quotation, Quotation):
        raise ConversionError('Only quotations can be converted to a proforma invoice')
    return _convert(quotation, 'proforma', user=user, today=today)


def convert_quotation_to_invoice(quotation, user=None, today=None):
    if not isinstance(quotation, Quotation):
        raise ConversionError('Only quotations can be converted with this operation')
    return _convert(quotation, 'invoice', user=user, today=today)


def convert_proforma_to_invoice(proforma, user=None, today=None):
    if not isinstance(proforma, ProformaInvoice):
        raise ConversionError('Only proforma invoices can be converted with this operation')
    return _convert(proforma, 'invoice', user=user, today=today)
