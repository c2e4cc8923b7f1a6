from rest_framework import serializers
from .models import Customer, Supplier, CustomerTransaction, SupplierTransaction


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ['id', 'name', 'phone', 'address', 'balance', 'created_at', 'updated_at']
        read_only_fields = fields


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'name', 'phone', 'address', 'balance', 'created_at', 'updated_at']
        read_only_fields = fields


class PartyWriteSerializer(serializers.Serializer):
    """Input for creating or updating a customer or supplier"""
    name = serializers.CharField(max_length=200, allow_blank=True)
    phone = serializers.CharField(max_length=20, allow_blank=True, required=False, default='')
    address = serializers.CharField(allow_blank=True, required=False, default='')


class PartyUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, allow_blank=True, required=False)
    phone = serializers.CharField(max_length=20, allow_blank=True, required=False)
    address = serializers.CharField(allow_blank=True, required=False)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)


class PostingSerializer(serializers.Serializer):
    """Input for payments, charges and adjustments; the service checks the sign"""
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    description = serializers.CharField(allow_blank=True, required=False, default='')
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)


class CustomerTransactionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    invoice_number = serializers.IntegerField(source='invoice.invoice_number', read_only=True, default=None)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = CustomerTransaction
        fields = [
            'id', 'customer', 'customer_name', 'invoice', 'invoice_number', 'amount',
            'transaction_type', 'description', 'date', 'created_by_username', 'created_at'
        ]
        read_only_fields = fields


class SupplierTransactionSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = SupplierTransaction
        fields = [
            'id', 'supplier', 'supplier_name', 'stock_movement', 'amount',
            'transaction_type', 'description', 'date', 'created_by_username', 'created_at'
        ]
        read_only_fields = fields
