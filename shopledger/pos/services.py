"""
Sales engine: turns cart lines into an invoice.

``checkout`` is all-or-nothing. The invoice, its items, the stock decrements,
the ``out`` movements and (for credit sales) the customer ledger charge are
written in one transaction.
"""
import logging
from calendar import monthrange
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from shopledger.catalog import services as catalog_services
from shopledger.catalog.models import Product
from shopledger.core.exceptions import InsufficientStock, ValidationFailed
from shopledger.core.sequences import INVOICE_SEQUENCE, next_value
from shopledger.core.utils import parse_id, to_decimal, to_int
from shopledger.inventory.models import MovementType
from shopledger.inventory.services import record_movement
from shopledger.parties.models import Customer
from shopledger.parties.services import customer_ledger
from .models import Invoice, InvoiceItem, PaymentType

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    product_id: Any
    quantity: int
    # Defaults to the product's sale price at checkout
    unit_price: Optional[Decimal] = None


def _clean_lines(lines):
    if not lines:
        raise ValidationFailed('Cart is empty', field='items')
    cleaned = []
    for index, line in enumerate(lines):
        quantity = to_int(line.quantity, 'quantity')
        if quantity <= 0:
            raise ValidationFailed('Quantity must be greater than zero', field='quantity', line=index)
        unit_price = None
        if line.unit_price is not None:
            unit_price = to_decimal(line.unit_price, 'unit_price', max_digits=12)
            if unit_price < 0:
                raise ValidationFailed('unit_price cannot be negative', field='unit_price', line=index)
        product_id = parse_id(line.product_id)
        if product_id is None:
            raise ValidationFailed('Product not found', field='product_id', product_id=str(line.product_id))
        cleaned.append(CartLine(product_id, quantity, unit_price))
    return cleaned


def _allow_negative_stock():
    return getattr(settings, 'SHOPLEDGER_ALLOW_NEGATIVE_STOCK', True)


def _locked_customer(customer_id):
    pk = parse_id(customer_id)
    customer = Customer.objects.select_for_update().filter(pk=pk).first() if pk else None
    if customer is None:
        raise ValidationFailed('Customer not found', field='customer_id', customer_id=str(customer_id))
    return customer


def checkout(lines, payment_type, customer_id=None, user=None, invoice_date=None):
    """Create an invoice from cart lines.

    Raises ValidationFailed for bad input (empty cart, unknown product,
    credit sale without a known customer) and InsufficientStock when
    negative stock is disabled and a line exceeds the on-hand quantity.
    """
    if payment_type not in PaymentType.values:
        raise ValidationFailed(f'Invalid payment type: {payment_type}', field='payment_type')
    lines = _clean_lines(lines)

    if payment_type == PaymentType.CREDIT and customer_id is None:
        raise ValidationFailed('A customer is required for credit sales', field='customer_id')

    with transaction.atomic():
        customer = None
        if payment_type == PaymentType.CREDIT:
            # Held until commit so the customer cannot be deleted under the sale
            customer = _locked_customer(customer_id)

        # Lock in a stable order so concurrent checkouts cannot deadlock
        product_ids = sorted({line.product_id for line in lines}, key=str)
        products = {
            product.id: product
            for product in Product.objects.select_for_update().filter(pk__in=product_ids).order_by('id')
        }
        missing = [str(pk) for pk in product_ids if pk not in products]
        if missing:
            raise ValidationFailed('Product not found', field='product_id', product_ids=missing)

        if not _allow_negative_stock():
            requested = {}
            for line in lines:
                requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
            for pk, quantity in requested.items():
                product = products[pk]
                if quantity > product.quantity:
                    raise InsufficientStock(
                        f"Insufficient stock for '{product.name}': {product.quantity} available, {quantity} requested",
                        product_id=str(pk), available=product.quantity, requested=quantity,
                    )

        invoice_number = next_value(INVOICE_SEQUENCE)

        items = []
        total_amount = Decimal('0.00')
        total_profit = Decimal('0.00')
        for line in lines:
            product = products[line.product_id]
            unit_price = product.sale_price if line.unit_price is None else line.unit_price
            profit = (unit_price - product.purchase_price) * line.quantity
            total_amount += unit_price * line.quantity
            total_profit += profit
            items.append(InvoiceItem(
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                unit_price=unit_price,
                purchase_price=product.purchase_price,
                profit=profit,
            ))

        invoice = Invoice.objects.create(
            invoice_number=invoice_number,
            invoice_date=invoice_date or timezone.now(),
            payment_type=payment_type,
            customer=customer,
            customer_name=customer.name if customer else '',
            total_amount=total_amount,
            total_profit=total_profit,
            created_by=user if user is not None and user.is_authenticated else None,
        )
        for item in items:
            item.invoice = invoice
        InvoiceItem.objects.bulk_create(items)

        for line in lines:
            product = products[line.product_id]
            catalog_services.adjust_quantity(product.id, -line.quantity)
            record_movement(product, line.quantity, MovementType.OUT, f"Sales invoice #{invoice_number}", user)

        if customer is not None and total_amount > 0:
            posted = customer_ledger.add_charge(
                customer.id,
                total_amount,
                f"Sales invoice #{invoice_number}",
                date=invoice.invoice_date,
                user=user,
                invoice=invoice,
            )
            if posted is None:
                raise ValidationFailed('Customer not found', field='customer_id', customer_id=str(customer.id))

    logger.info(f"Checkout: invoice #{invoice_number} {payment_type} total={total_amount} lines={len(items)}")
    return invoice


def get_invoice(invoice_id):
    pk = parse_id(invoice_id)
    if pk is None:
        return None
    return Invoice.objects.filter(pk=pk).first()


def list_invoices(payment_type=None, customer_id=None):
    queryset = Invoice.objects.all()
    if payment_type:
        queryset = queryset.filter(payment_type=payment_type)
    if customer_id is not None:
        queryset = queryset.filter(customer_id=parse_id(customer_id))
    return queryset


def _local_range(start_day, end_day):
    """[start, end) instants covering whole days in the configured time zone"""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(start_day, time.min), tz)
    end = timezone.make_aware(datetime.combine(end_day, time.min), tz)
    return start, end


def invoices_for_day(day):
    start, end = _local_range(day, day + timedelta(days=1))
    return Invoice.objects.filter(invoice_date__gte=start, invoice_date__lt=end)


def invoices_for_month(year, month):
    first = datetime(year, month, 1).date()
    last = first + timedelta(days=monthrange(year, month)[1])
    start, end = _local_range(first, last)
    return Invoice.objects.filter(invoice_date__gte=start, invoice_date__lt=end)
