import logging
from decimal import Decimal

from django.db import transaction

from invoicing.catalog.models import Product
from .models import StockMovement

logger = logging.getLogger(__name__)

MOVEMENT_TYPES = ('in', 'out', 'adjustment')


def next_stock_level(current, quantity, movement_type):
    """
    Stock level after a movement.

    ``in`` adds, ``out`` subtracts without going below zero and
    ``adjustment`` sets the absolute level.
    """
    if movement_type == 'in':
        return current + quantity
    if movement_type == 'out':
        return max(current - quantity, Decimal('0'))
    if movement_type == 'adjustment':
        return quantity
    raise ValueError(f"Unknown movement type: {movement_type}")


def apply_stock_movement(product, quantity, movement_type, user=None, reference='', notes=''):
    """Lock the product row, move its stock and record the movement"""
    quantity = Decimal(str(quantity))
    if movement_type not in MOVEMENT_TYPES:
        raise ValueError(f"Unknown movement type: {movement_type}")
    if quantity < 0:
        raise ValueError('Quantity cannot be negative')
    if movement_type != 'adjustment' and quantity == 0:
        raise ValueError('Quantity must be greater than zero')

    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        previous_stock = locked.current_stock
        new_stock = next_stock_level(previous_stock, quantity, movement_type)

        locked.current_stock = new_stock
        locked.save(update_fields=['current_stock', 'updated_at'])

        movement = StockMovement.objects.create(
            product=locked,
            movement_type=movement_type,
            quantity=quantity,
            previous_stock=previous_stock,
            new_stock=new_stock,
            reference=reference or '',
            notes=notes or '',
            created_by=user if user is not None and user.is_authenticated else None,
        )

    product.current_stock = new_stock
    logger.info(f"Stock {movement_type} for product {locked.sku}: {previous_stock} -> {new_stock}")
    return movement
