from rest_framework import serializers
from .models import Invoice, InvoiceItem, PaymentType


class InvoiceItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = InvoiceItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'purchase_price', 'profit', 'line_total']
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'invoice_date', 'payment_type', 'customer', 'customer_name',
            'total_amount', 'total_profit', 'items', 'created_by_username', 'created_at'
        ]
        read_only_fields = fields


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, default=None)


class CheckoutSerializer(serializers.Serializer):
    items = CartLineSerializer(many=True, allow_empty=True)
    payment_type = serializers.ChoiceField(choices=PaymentType.choices)
    customer_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    invoice_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
