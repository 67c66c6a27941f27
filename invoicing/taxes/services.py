"""
Resolution of the VAT rate that applies to a document line.

Precedence, first match wins:

1. tax-exempt customer -> 0
2. product marked non-taxable -> 0
3. explicit ``tax_rate`` on the product
4. the product's tax configuration, when active and applicable on the date
5. the company's default tax configuration, when active and applicable
6. the company ``vat_rate``
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from .models import TaxConfiguration

logger = logging.getLogger(__name__)

ZERO_RATE = Decimal('0.00')


def get_default_tax_configuration(company, on=None):
    on = on or timezone.localdate()
    for config in TaxConfiguration.objects.filter(company=company, is_default=True, is_active=True):
        if config.is_applicable_on(on):
            return config
    return None


def get_applicable_tax_rate(company, product=None, customer=None, on=None):
    """Return the VAT percentage for a line of ``product`` sold to ``customer``"""
    on = on or timezone.localdate()

    if customer is not None and customer.is_tax_exempt:
        return ZERO_RATE

    if product is not None:
        if not product.taxable:
            return ZERO_RATE
        if product.tax_rate is not None:
            return product.tax_rate
        config = product.tax_configuration
        if config is not None and config.is_applicable_on(on):
            return config.rate

    default = get_default_tax_configuration(company, on)
    if default is not None:
        return default.rate
    return company.vat_rate


def set_default_tax_configuration(config):
    """Make ``config`` the only default configuration of its company"""
    with transaction.atomic():
        TaxConfiguration.objects.filter(
            company_id=config.company_id, is_default=True
        ).exclude(pk=config.pk).update(is_default=False, updated_at=timezone.now())
        if not config.is_default:
            config.is_default = True
            config.save(update_fields=['is_default', 'updated_at'])
    logger.info(f"Tax configuration {config.code} is now the default for company {config.company_id}")
    return config


def tax_configuration_in_use(config):
    return config.products.exists()
