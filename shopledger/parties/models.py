import uuid

from django.db import models
from django.utils import timezone
from decimal import Decimal

from shopledger.core.models import AppendOnlyModel


class Party(models.Model):
    """Fields shared by customers and suppliers"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    # Running balance; equals the sum of the party's ledger amounts
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        abstract = True
        ordering = ['created_at']


class Customer(Party):
    """Customers; a positive balance is money owed by the customer"""

    class Meta(Party.Meta):
        db_table = 'customers'


class Supplier(Party):
    """Suppliers; a positive balance is money owed to the supplier"""

    class Meta(Party.Meta):
        db_table = 'suppliers'


class CustomerTransactionType(models.TextChoices):
    SALE = 'sale', 'Sale'
    PAYMENT = 'payment', 'Payment'
    ADJUSTMENT = 'adjustment', 'Adjustment'


class SupplierTransactionType(models.TextChoices):
    PURCHASE = 'purchase', 'Purchase'
    PAYMENT = 'payment', 'Payment'
    ADJUSTMENT = 'adjustment', 'Adjustment'


class LedgerTransaction(AppendOnlyModel):
    """Signed ledger line; append-only"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    description = models.TextField(blank=True)
    date = models.DateTimeField(default=timezone.now)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['created_at']


class CustomerTransaction(LedgerTransaction):
    """Ledger lines for customer accounts"""
    # No database constraint: lines outlive a deleted (zero balance) customer
    customer = models.ForeignKey(Customer, on_delete=models.DO_NOTHING, db_constraint=False, related_name='transactions')
    invoice = models.ForeignKey('pos.Invoice', on_delete=models.DO_NOTHING, db_constraint=False, null=True, blank=True, related_name='ledger_transactions')
    transaction_type = models.CharField(max_length=20, choices=CustomerTransactionType.choices)

    def __str__(self):
        return f"{self.customer_id} - {self.transaction_type} - {self.amount}"

    class Meta(LedgerTransaction.Meta):
        db_table = 'customer_transactions'
        indexes = [
            models.Index(fields=['customer', 'created_at'], name='idx_custtx_customer_created'),
        ]


class SupplierTransaction(LedgerTransaction):
    """Ledger lines for supplier accounts"""
    supplier = models.ForeignKey(Supplier, on_delete=models.DO_NOTHING, db_constraint=False, related_name='transactions')
    # Set for credit purchases posted together with a stock-in
    stock_movement = models.ForeignKey('inventory.StockMovement', on_delete=models.DO_NOTHING, db_constraint=False, null=True, blank=True, related_name='supplier_transactions')
    transaction_type = models.CharField(max_length=20, choices=SupplierTransactionType.choices)

    def __str__(self):
        return f"{self.supplier_id} - {self.transaction_type} - {self.amount}"

    class Meta(LedgerTransaction.Meta):
        db_table = 'supplier_transactions'
        indexes = [
            models.Index(fields=['supplier', 'created_at'], name='idx_suptx_supplier_created'),
        ]
