import uuid

from django.db import models
from decimal import Decimal


class Product(models.Model):
    """Product master; ``quantity`` is the on-hand stock"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, db_index=True)
    purchase_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    sale_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    # Changed only through catalog.services.adjust_quantity / set_quantity
    quantity = models.IntegerField(default=0)
    minimum_quantity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def is_low_stock(self):
        return self.quantity <= self.minimum_quantity

    class Meta:
        db_table = 'products'
        ordering = ['created_at']
