from rest_framework import serializers

from .models import Negotiation


class NegotiationSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_image_url = serializers.CharField(source='product.image_url', read_only=True, allow_null=True)
    buyer_name = serializers.CharField(read_only=True, required=False)

    class Meta:
        model = Negotiation
        fields = ['id', 'product', 'product_name', 'product_image_url', 'buyer_id', 'buyer_name', 'seller_id',
                  'original_price', 'proposed_price', 'message', 'status', 'created_at', 'updated_at']
        read_only_fields = fields


class ProposePriceSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    # Range checks live in the service so every caller gets the same error
    proposed_price = serializers.CharField(max_length=32)
    message = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)
