"""Access to the INVOICING settings dict with built-in defaults"""
from decimal import Decimal
from django.conf import settings

DEFAULTS = {
    'DOCUMENT_VALIDITY_DAYS': 30,
    'PAYMENT_TERMS_DAYS': 30,
    'DEFAULT_VAT_RATE': '16.00',
    'NUMBER_PADDING': 3,
    'DEFAULT_PAGE_SIZE': 50,
    'SEQUENCE_PREFIXES': {
        'quotation': 'QUO',
        'proforma': 'PRO',
        'invoice': 'INV',
    },
}


def invoicing_setting(name):
    """Return settings.INVOICING[name], falling back to DEFAULTS"""
    configured = getattr(settings, 'INVOICING', {})
    if name not in DEFAULTS and name not in configured:
        raise KeyError(f"Unknown invoicing setting: {name}")
    value = configured.get(name, DEFAULTS.get(name))
    if name == 'DEFAULT_VAT_RATE':
        return Decimal(str(value))
    return value
