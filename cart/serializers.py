from rest_framework import serializers

from .models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_image_url = serializers.CharField(source='product.image_url', read_only=True, allow_null=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ['id', 'product', 'product_name', 'product_image_url', 'quantity', 'negotiation',
                  'unit_price', 'line_total', 'created_at', 'updated_at']
        read_only_fields = fields


class AddToCartSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(required=False, default=1)
    negotiation_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class QuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
