"""
Amount arithmetic shared by quotations, proformas and invoices.

Every monetary value is a ``Decimal`` rounded half-up to cents at line
level. Document totals are sums of the rounded line values, so a header
can always be re-derived exactly from its items.
"""
from collections import namedtuple
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')

LineAmounts = namedtuple('LineAmounts', [
    'gross', 'discount_amount', 'net', 'vat_amount', 'additional_tax_amount', 'line_total', 'taxes',
])

DocumentTotals = namedtuple('DocumentTotals', [
    'subtotal', 'discount_amount', 'vat_amount', 'additional_tax_amount', 'total',
])


def money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value, field='value'):
    if isinstance(value, Decimal):
        return value
    if value is None or value == '':
        return Decimal('0')
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValueError(f"{field} must be a number, got {value!r}")


def _check_percentage(value, field):
    if value < 0 or value > HUNDRED:
        raise ValueError(f"{field} must be between 0 and 100")


def normalize_line_taxes(line_item_taxes):
    """Coerce ``[{name, rate, is_compound}]`` entries into a clean list"""
    taxes = []
    for entry in line_item_taxes or ():
        if not isinstance(entry, dict):
            raise ValueError('Each line tax must be an object with name and rate')
        rate = to_decimal(entry.get('rate'), 'tax rate')
        _check_percentage(rate, 'tax rate')
        taxes.append({
            'name': str(entry.get('name') or 'Tax'),
            'rate': rate,
            'is_compound': bool(entry.get('is_compound', False)),
        })
    return taxes


def calculate_line(quantity, unit_price, discount_percentage=0, vat_rate=0, line_item_taxes=()):
    """
    Amounts of a single document line.

    Non-compound additional taxes are charged on the discounted net amount;
    compound ones on the net amount plus the non-compound taxes.
    """
    quantity = to_decimal(quantity, 'quantity')
    unit_price = to_decimal(unit_price, 'unit_price')
    discount_percentage = to_decimal(discount_percentage, 'discount_percentage')
    vat_rate = to_decimal(vat_rate, 'vat_rate')

    if quantity <= 0:
        raise ValueError('quantity must be greater than zero')
    if unit_price < 0:
        raise ValueError('unit_price cannot be negative')
    _check_percentage(discount_percentage, 'discount_percentage')
    _check_percentage(vat_rate, 'vat_rate')

    gross = money(quantity * unit_price)
    discount_amount = money(gross * discount_percentage / HUNDRED)
    net = gross - discount_amount
    vat_amount = money(net * vat_rate / HUNDRED)

    taxes = normalize_line_taxes(line_item_taxes)
    simple_total = ZERO
    for tax in taxes:
        if not tax['is_compound']:
            tax['amount'] = money(net * tax['rate'] / HUNDRED)
            simple_total += tax['amount']
    compound_base = net + simple_total
    for tax in taxes:
        if tax['is_compound']:
            tax['amount'] = money(compound_base * tax['rate'] / HUNDRED)
    additional_tax_amount = sum((tax['amount'] for tax in taxes), ZERO)

    return LineAmounts(
        gross=gross,
        discount_amount=discount_amount,
        net=net,
        vat_amount=vat_amount,
        additional_tax_amount=additional_tax_amount,
        line_total=net + vat_amount + additional_tax_amount,
        taxes=taxes,
    )


def calculate_totals(lines):
    """Roll ``LineAmounts`` up into document header totals"""
    subtotal = discount_amount = vat_amount = additional_tax_amount = ZERO
    for line in lines:
        subtotal += line.gross
        discount_amount += line.discount_amount
        vat_amount += line.vat_amount
        additional_tax_amount += line.additional_tax_amount

    return DocumentTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        vat_amount=vat_amount,
        additional_tax_amount=additional_tax_amount,
        total=subtotal - discount_amount + vat_amount + additional_tax_amount,
    )


def serializable_taxes(taxes):
    """Line taxes with Decimals rendered as strings for JSON storage"""
    return [
        {
            'name': tax['name'],
            'rate': str(tax['rate']),
            'is_compound': tax['is_compound'],
            'amount': str(tax.get('amount', ZERO)),
        }
        for tax in taxes
    ]
