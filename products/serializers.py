from rest_framework import serializers
from .models import Product, Review


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'price', 'image_url', 'category',
                  'stock_quantity', 'seller_id', 'created_at', 'updated_at']
        read_only_fields = fields


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'product', 'user_id', 'user_name', 'rating', 'comment', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_user_name(self, obj):
        names = self.context.get('display_names') or {}
        return names.get(obj.user_id)


class ReviewInputSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class ProductInputSerializer(serializers.Serializer):
    """Shape check only; required fields and price rules are enforced by the service."""
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.URLField(required=False, allow_null=True, allow_blank=True, max_length=500)
    category = serializers.CharField(required=False, allow_blank=True, max_length=100)
    stock_quantity = serializers.IntegerField(required=False)
