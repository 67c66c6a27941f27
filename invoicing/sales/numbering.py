"""
Document number allocation.

Numbers look like ``INV-2026-001``: ``{prefix}-{year}-{counter}``, the
counter zero-padded to the sequence's padding length. One
``NumberSequence`` row per company and document type holds the next
counter value; it is locked with ``SELECT ... FOR UPDATE`` for the rest of
the caller's transaction, so two writers never read the same value.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from invoicing.core.conf import invoicing_setting
from .models import NumberSequence, DOCUMENT_MODELS

logger = logging.getLogger(__name__)


def default_prefix(company, sequence_type):
    if sequence_type == 'invoice' and company.invoice_prefix:
        return company.invoice_prefix
    return invoicing_setting('SEQUENCE_PREFIXES')[sequence_type]


def format_number(prefix, year, number, padding_length):
    return f"{prefix}-{year}-{str(number).zfill(padding_length)}"


def _number_in_use(company, sequence_type, number):
    model = DOCUMENT_MODELS[sequence_type][0]
    return model.objects.filter(company=company, **{model.NUMBER_FIELD: number}).exists()


def _create_sequence(company, sequence_type):
    """
    Insert the sequence row for a first document: number 1 is issued and
    the row starts at 2. Returns None when another writer inserted it first.
    """
    try:
        with transaction.atomic():
            sequence = NumberSequence.objects.create(
                company=company,
                sequence_type=sequence_type,
                prefix=default_prefix(company, sequence_type),
                current_number=2,
                padding_length=invoicing_setting('NUMBER_PADDING'),
            )
    except IntegrityError:
        logger.info(f"Number sequence {sequence_type} for company {company.id} created concurrently, retrying")
        return None
    logger.info(f"Created number sequence {sequence_type} for company {company.id}")
    return sequence


def allocate_number(company, sequence_type, issue_date=None):
    """Issue the next free document number of ``sequence_type`` for ``company``"""
    if sequence_type not in DOCUMENT_MODELS:
        raise ValueError(f"Unknown sequence type: {sequence_type}")
    year = (issue_date or timezone.localdate()).year

    with transaction.atomic():
        sequence = NumberSequence.objects.select_for_update().filter(
            company=company, sequence_type=sequence_type
        ).first()

        if sequence is None:
            created = _create_sequence(company, sequence_type)
            if created is not None:
                number = format_number(created.prefix, year, 1, created.padding_length)
                if not _number_in_use(company, sequence_type, number):
                    return number
                sequence = NumberSequence.objects.select_for_update().get(pk=created.pk)
            else:
                sequence = NumberSequence.objects.select_for_update().get(
                    company=company, sequence_type=sequence_type
                )

        while True:
            number = format_number(sequence.prefix, year, sequence.current_number, sequence.padding_length)
            sequence.current_number += 1
            if not _number_in_use(company, sequence_type, number):
                break
            logger.warning(f"Document number {number} already exists for company {company.id}, skipping")

        sequence.save(update_fields=['current_number', 'updated_at'])

    return number
