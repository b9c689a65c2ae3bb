from rest_framework import serializers


class NotificationSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    title = serializers.CharField()
    text = serializers.CharField()
    created_at = serializers.DateTimeField()
    is_read = serializers.BooleanField()
    conversation_id = serializers.IntegerField(allow_null=True)
    negotiation_id = serializers.IntegerField(allow_null=True)
    product_name = serializers.CharField(allow_null=True)


def feed_to_dict(feed):
    return {
        'notifications': NotificationSerializer(feed.notifications, many=True).data,
        'unread_count': feed.unread_count,
    }
