from rest_framework import serializers

from .models import ChatbotExchange


class ChatbotExchangeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChatbotExchange
        fields = ['id', 'session_id', 'message', 'response', 'created_at']


class AskSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=2000)
    session_id = serializers.CharField(max_length=100, required=False)
