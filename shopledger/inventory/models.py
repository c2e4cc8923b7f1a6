import uuid

from django.db import models
from django.utils import timezone

from shopledger.core.exceptions import AuditLocked
from shopledger.core.models import AppendOnlyModel


class MovementType(models.TextChoices):
    IN = 'in', 'Stock In'
    OUT = 'out', 'Stock Out'
    ADJUSTMENT = 'adjustment', 'Adjustment'


class StockMovement(AppendOnlyModel):
    """Append-only log of every on-hand quantity change"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Kept after the product is deleted, together with the name snapshot
    product = models.ForeignKey('catalog.Product', on_delete=models.DO_NOTHING, db_constraint=False, related_name='movements')
    product_name = models.CharField(max_length=200)
    # Positive for in/out, signed for adjustments
    quantity = models.IntegerField()
    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    reason = models.CharField(max_length=255, blank=True)
    date = models.DateTimeField(default=timezone.now)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.movement_type} {self.quantity} x {self.product_name}"

    class Meta:
        db_table = 'stock_movements'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['product', 'created_at'], name='idx_movement_product_created'),
            models.Index(fields=['movement_type'], name='idx_movement_type'),
        ]


class AuditStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    APPROVED = 'approved', 'Approved'


class InventoryAudit(models.Model):
    """Full-catalog stock count; draft until approved, then permanent"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    audit_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=AuditStatus.choices, default=AuditStatus.DRAFT)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_audits')
    created_at = models.DateTimeField(auto_now_add=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_inventory_audits')

    @property
    def is_draft(self):
        return self.status == AuditStatus.DRAFT

    def delete(self, *args, **kwargs):
        if not self.is_draft:
            raise AuditLocked('Approved inventory audits cannot be deleted')
        return super().delete(*args, **kwargs)

    def __str__(self):
        return f"Audit {self.audit_date:%Y-%m-%d} ({self.status})"

    class Meta:
        db_table = 'inventory_audits'
        ordering = ['-created_at']


class InventoryAuditItem(models.Model):
    """Counted vs recorded quantity of one product within an audit"""
    audit = models.ForeignKey(InventoryAudit, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.DO_NOTHING, db_constraint=False, related_name='audit_items')
    product_name = models.CharField(max_length=200)
    # Frozen when the audit is created
    system_quantity = models.IntegerField()
    actual_quantity = models.IntegerField()
    difference = models.IntegerField(default=0)

    def __str__(self):
        return f"{self.product_name}: {self.system_quantity} -> {self.actual_quantity}"

    class Meta:
        db_table = 'inventory_audit_items'
        ordering = ['id']
        unique_together = [['audit', 'product']]
