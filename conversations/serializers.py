from rest_framework import serializers

from profiles.services import resolve_display_name
from .bodies import body_to_dict, decode_body
from .models import Conversation, ConversationMessage


class ConversationMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.SerializerMethodField()
    body = serializers.SerializerMethodField()

    class Meta:
        model = ConversationMessage
        fields = ['id', 'conversation', 'sender_id', 'sender_name', 'message', 'message_type',
                  'body', 'is_read', 'created_at']
        read_only_fields = fields

    def get_sender_name(self, obj):
        names = self.context.get('display_names')
        if names and obj.sender_id in names:
            return names[obj.sender_id]
        return resolve_display_name(obj.sender_id)

    def get_body(self, obj):
        return body_to_dict(decode_body(obj))


class SendMessageSerializer(serializers.Serializer):
    message = serializers.CharField(trim_whitespace=True, max_length=5000)


class MentionProductSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()


class ConversationListSerializer(serializers.ModelSerializer):
    """Conversation row for the chat list (counterpart, product, unread count and preview)"""
    other_user_id = serializers.CharField(source='counterpart_id', read_only=True)
    other_user_name = serializers.CharField(source='counterpart_name', read_only=True)
    product_name = serializers.CharField(read_only=True, allow_null=True)
    unread_count = serializers.IntegerField(read_only=True)
    last_message = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = ['id', 'buyer_id', 'seller_id', 'product', 'product_name', 'other_user_id',
                  'other_user_name', 'last_message_at', 'created_at', 'unread_count', 'last_message']

    def get_last_message(self, obj):
        """Get only the last message preview (not full message)"""
        last_message = obj.messages.last()
        if last_message:
            body = decode_body(last_message)
            preview = getattr(body, 'text', None) or f"Product: {getattr(body, 'name', '')}"
            return {
                'sender_id': last_message.sender_id,
                'preview': preview[:100] + '...' if len(preview) > 100 else preview,
                'message_type': last_message.message_type,
                'created_at': last_message.created_at,
                'is_read': last_message.is_read
            }
        return None


class ConversationSerializer(serializers.ModelSerializer):
    product_name = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = ['id', 'buyer_id', 'seller_id', 'product', 'product_name', 'last_message_at', 'created_at']

    def get_product_name(self, obj):
        return obj.product.name if obj.product_id else None


class ContactSellerSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(required=False)
    seller_id = serializers.CharField(required=False, max_length=100)

    def validate(self, attrs):
        if not attrs.get('product_id') and not attrs.get('seller_id'):
            raise serializers.ValidationError("Either product_id or seller_id is required")
        return attrs
