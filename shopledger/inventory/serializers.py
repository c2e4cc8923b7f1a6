from rest_framework import serializers
from .models import StockMovement, InventoryAudit, InventoryAuditItem


class StockMovementSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'product_name', 'quantity', 'movement_type', 'reason', 'date',
            'created_by_username', 'created_at'
        ]
        read_only_fields = fields


class StockInSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, allow_blank=True, required=False, default='')
    supplier_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, default=None)


class StockAdjustSerializer(serializers.Serializer):
    delta = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, allow_blank=True, required=False, default='')


class InventoryAuditItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryAuditItem
        fields = ['id', 'audit', 'product', 'product_name', 'system_quantity', 'actual_quantity', 'difference']
        read_only_fields = fields


class InventoryAuditSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)
    approved_by_username = serializers.CharField(source='approved_by.username', read_only=True, default=None)

    class Meta:
        model = InventoryAudit
        fields = [
            'id', 'audit_date', 'status', 'notes', 'created_by_username', 'created_at',
            'approved_at', 'approved_by_username'
        ]
        read_only_fields = fields


class InventoryAuditDetailSerializer(InventoryAuditSerializer):
    items = InventoryAuditItemSerializer(many=True, read_only=True)

    class Meta(InventoryAuditSerializer.Meta):
        fields = InventoryAuditSerializer.Meta.fields + ['items']
        read_only_fields = fields


class AuditCreateSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True, required=False, default='')


class AuditItemUpdateSerializer(serializers.Serializer):
    actual_quantity = serializers.IntegerField()
