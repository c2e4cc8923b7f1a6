from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'purchase_price', 'sale_price', 'quantity', 'minimum_quantity',
            'is_low_stock', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, allow_blank=True)
    purchase_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField(required=False, default=0)
    minimum_quantity = serializers.IntegerField(required=False, default=0)


class ProductUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, allow_blank=True, required=False)
    purchase_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    minimum_quantity = serializers.IntegerField(required=False)
    quantity = serializers.IntegerField(required=False)


