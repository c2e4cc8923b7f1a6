"""
Stock movement recorder.

Every on-hand quantity change after a product is created goes through one of
these functions (or checkout / audit approval) and leaves a movement row.
"""
import logging

from django.db import transaction

from shopledger.catalog import services as catalog_services
from shopledger.catalog.models import Product
from shopledger.core.exceptions import ValidationFailed
from shopledger.core.utils import parse_id, to_decimal, to_int
from shopledger.parties.services import supplier_ledger
from .models import MovementType, StockMovement

logger = logging.getLogger(__name__)


def record_movement(product, quantity, movement_type, reason='', user=None):
    if movement_type not in MovementType.values:
        raise ValidationFailed(f'Invalid movement type: {movement_type}', field='movement_type')
    return StockMovement.objects.create(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        movement_type=movement_type,
        reason=reason or '',
        created_by=user if user is not None and user.is_authenticated else None,
    )


def _locked_product(product_id):
    pk = parse_id(product_id)
    product = Product.objects.select_for_update().filter(pk=pk).first() if pk else None
    if product is None:
        raise ValidationFailed('Product not found', field='product_id', product_id=str(product_id))
    return product


def stock_in(product_id, quantity, reason='', supplier_id=None, unit_cost=None, user=None):
    """Receive stock, optionally on credit from a supplier.

    The quantity increase, the ``in`` movement and the supplier purchase (if
    any) commit together. The purchase line references the movement.
    """
    quantity = to_int(quantity, 'quantity')
    if quantity <= 0:
        raise ValidationFailed('Quantity must be greater than zero', field='quantity')

    with transaction.atomic():
        product = _locked_product(product_id)
        if supplier_id is not None:
            supplier = supplier_ledger.get(supplier_id)
            if supplier is None:
                raise ValidationFailed('Supplier not found', field='supplier_id', supplier_id=str(supplier_id))
            cost = product.purchase_price if unit_cost is None else to_decimal(unit_cost, 'unit_cost', max_digits=12)
            if cost < 0:
                raise ValidationFailed('unit_cost cannot be negative', field='unit_cost')

        catalog_services.adjust_quantity(product.id, quantity)
        movement = record_movement(product, quantity, MovementType.IN, reason, user)

        if supplier_id is not None:
            total = cost * quantity
            if total > 0:
                supplier_ledger.add_charge(
                    supplier.id,
                    total,
                    f"Purchase: {quantity} x {product.name}",
                    user=user,
                    stock_movement=movement,
                )

    logger.info(f"Stock in: {product.id} '{product.name}' +{quantity}"
                + (f" from supplier {supplier_id}" if supplier_id is not None else ""))
    return movement


def adjust_stock(product_id, delta, reason='', user=None):
    """Manual correction (damage, loss, found stock); returns None for an unknown product"""
    delta = to_int(delta, 'delta')
    if delta == 0:
        raise ValidationFailed('Adjustment cannot be zero', field='delta')
    pk = parse_id(product_id)
    if pk is None:
        return None

    with transaction.atomic():
        product = Product.objects.select_for_update().filter(pk=pk).first()
        if product is None:
            return None
        catalog_services.adjust_quantity(product.id, delta)
        record_movement(product, delta, MovementType.ADJUSTMENT, reason, user)

    logger.info(f"Stock adjusted: {product.id} '{product.name}' {delta:+d}")
    return Product.objects.get(pk=pk)


def list_movements(product_id=None, movement_type=None):
    queryset = StockMovement.objects.all()
    if product_id is not None:
        queryset = queryset.filter(product_id=parse_id(product_id))
    if movement_type:
        queryset = queryset.filter(movement_type=movement_type)
    return queryset
