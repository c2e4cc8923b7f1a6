import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from shopledger.core.models import AppendOnlyModel


class PaymentType(models.TextChoices):
    CASH = 'cash', 'Cash'
    CREDIT = 'credit', 'Credit'


class Invoice(AppendOnlyModel):
    """Sales invoice; immutable once written"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Taken from the 'invoice' sequence; never reused
    invoice_number = models.PositiveBigIntegerField(unique=True)
    invoice_date = models.DateTimeField(default=timezone.now, db_index=True)
    payment_type = models.CharField(max_length=20, choices=PaymentType.choices)
    customer = models.ForeignKey('parties.Customer', on_delete=models.DO_NOTHING, db_constraint=False, null=True, blank=True, related_name='invoices')
    customer_name = models.CharField(max_length=200, blank=True)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_profit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Invoice #{self.invoice_number}"

    class Meta:
        db_table = 'invoices'
        ordering = ['-invoice_date', '-invoice_number']
        indexes = [
            models.Index(fields=['payment_type', 'invoice_date'], name='idx_invoice_type_date'),
        ]


class InvoiceItem(AppendOnlyModel):
    """Invoice line with the prices in force at sale time"""
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.DO_NOTHING, db_constraint=False, related_name='invoice_items')
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    purchase_price = models.DecimalField(max_digits=12, decimal_places=2)
    profit = models.DecimalField(max_digits=14, decimal_places=2)

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"

    class Meta:
        db_table = 'invoice_items'
        ordering = ['id']
