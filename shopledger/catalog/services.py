"""
Product inventory manager.

``adjust_quantity`` is the sanctioned way to change on-hand stock; the only
other writer of ``Product.quantity`` is ``set_quantity``, reserved for
inventory audit approval. Unknown ids give ``None``/``False``, invalid input
raises ``ValidationFailed``.
"""
import logging
from decimal import Decimal

from django.db.models import F, Q
from django.utils import timezone

from shopledger.core.exceptions import ValidationFailed
from shopledger.core.utils import parse_id, to_decimal, to_int
from .models import Product

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'purchase_price', 'sale_price', 'minimum_quantity')


def _clean_name(name):
    name = (name or '').strip()
    if not name:
        raise ValidationFailed('Product name is required', field='name')
    return name


def _clean_price(value, field):
    price = to_decimal(value, field, max_digits=12)
    if price < 0:
        raise ValidationFailed(f'{field} cannot be negative', field=field)
    return price


def _clean_minimum(value):
    minimum = to_int(value, 'minimum_quantity')
    if minimum < 0:
        raise ValidationFailed('minimum_quantity cannot be negative', field='minimum_quantity')
    return minimum


def get_product(product_id):
    pk = parse_id(product_id)
    if pk is None:
        return None
    return Product.objects.filter(pk=pk).first()


def list_products(search=None):
    queryset = Product.objects.all()
    if search:
        queryset = queryset.filter(Q(name__icontains=search))
    return queryset


def create_product(name, purchase_price, sale_price, quantity=0, minimum_quantity=0):
    product = Product.objects.create(
        name=_clean_name(name),
        purchase_price=_clean_price(purchase_price, 'purchase_price'),
        sale_price=_clean_price(sale_price, 'sale_price'),
        quantity=to_int(quantity, 'quantity'),
        minimum_quantity=_clean_minimum(minimum_quantity),
    )
    logger.info(f"Product created: {product.id} '{product.name}' qty={product.quantity}")
    return product


def update_product(product_id, **fields):
    """Merge the given fields into the product.

    ``quantity`` is not editable here; stock changes go through stock-in,
    checkout or audit approval so that every change leaves a movement.
    """
    if 'quantity' in fields:
        raise ValidationFailed('quantity can only be changed through stock operations', field='quantity')
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationFailed(f"Unknown product fields: {', '.join(sorted(unknown))}")

    product = get_product(product_id)
    if product is None:
        return None

    if 'name' in fields:
        product.name = _clean_name(fields['name'])
    if 'purchase_price' in fields:
        product.purchase_price = _clean_price(fields['purchase_price'], 'purchase_price')
    if 'sale_price' in fields:
        product.sale_price = _clean_price(fields['sale_price'], 'sale_price')
    if 'minimum_quantity' in fields:
        product.minimum_quantity = _clean_minimum(fields['minimum_quantity'])

    product.save(update_fields=[*fields.keys(), 'updated_at'])
    return product


def delete_product(product_id):
    """Delete unconditionally; invoices, movements and audits keep the id and name snapshot"""
    product = get_product(product_id)
    if product is None:
        return False
    product.delete()
    logger.info(f"Product deleted: {product_id}")
    return True


def adjust_quantity(product_id, delta):
    """Add ``delta`` (may be negative) to the on-hand quantity.

    The arithmetic happens in the database so concurrent adjustments are
    never lost. No floor is applied here; callers enforce stock policy.
    """
    delta = to_int(delta, 'delta')
    pk = parse_id(product_id)
    if pk is None:
        return None
    updated = Product.objects.filter(pk=pk).update(quantity=F('quantity') + delta, updated_at=timezone.now())
    if not updated:
        return None
    return Product.objects.get(pk=pk)


def set_quantity(product_id, quantity):
    """Absolute set of the on-hand quantity (inventory audit approval only)"""
    quantity = to_int(quantity, 'quantity')
    pk = parse_id(product_id)
    if pk is None:
        return None
    updated = Product.objects.filter(pk=pk).update(quantity=quantity, updated_at=timezone.now())
    if not updated:
        return None
    return Product.objects.get(pk=pk)


def list_low_stock():
    return Product.objects.filter(quantity__lte=F('minimum_quantity'))


def stock_value():
    """Total on-hand value at purchase and sale prices"""
    totals = {'purchase_value': Decimal('0.00'), 'sale_value': Decimal('0.00')}
    for product in Product.objects.all().only('quantity', 'purchase_price', 'sale_price'):
        totals['purchase_value'] += product.purchase_price * product.quantity
        totals['sale_value'] += product.sale_price * product.quantity
    return totals
