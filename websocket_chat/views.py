from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.exceptions import ValidationFailed
from .services import ChatService


def _positive_int(value, name, default=None):
    if value in (None, ''):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{name} must be an integer")
    if number < 1:
        raise ValidationFailed(f"{name} must be positive")
    return number


class ConversationMessagesHistoryView(APIView):
    """
    HTTP endpoint for retrieving message history with pagination
    This complements the WebSocket real-time messaging
    """

    def get(self, request, conversation_id):
        page = _positive_int(request.GET.get('page'), 'page', 1)
        page_size = _positive_int(request.GET.get('page_size'), 'page_size')

        result = ChatService.get_conversation_messages(
            conversation_id=conversation_id,
            user_id=request.user_id,
            page=page,
            page_size=page_size
        )
        return Response(result, status=status.HTTP_200_OK)


class ConversationInfoView(APIView):
    """
    HTTP endpoint for getting conversation information
    """

    def get(self, request, conversation_id):
        result = ChatService.get_conversation_info(
            conversation_id=conversation_id,
            user_id=request.user_id
        )
        return Response(result, status=status.HTTP_200_OK)
