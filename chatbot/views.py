from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import AskSerializer, ChatbotExchangeSerializer


class ChatbotView(APIView):
    """Scripted shopping assistant: recent history and new questions"""

    def get(self, request):
        exchanges = services.history(request.user_id)
        return Response({'results': ChatbotExchangeSerializer(exchanges, many=True).data})

    def post(self, request):
        data = AskSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        exchange = services.ask(
            request.user_id,
            data.validated_data['message'],
            data.validated_data.get('session_id'),
        )
        return Response(ChatbotExchangeSerializer(exchange).data, status=status.HTTP_201_CREATED)
