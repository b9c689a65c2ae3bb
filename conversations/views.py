from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.pagination import StandardResultsSetPagination
from profiles.services import resolve_display_names
from . import services
from .models import ConversationMessage
from .serializers import (
    ContactSellerSerializer,
    ConversationListSerializer,
    ConversationMessageSerializer,
    ConversationSerializer,
    MentionProductSerializer,
    SendMessageSerializer,
)


class ConversationListView(APIView):
    """List the caller's conversations or start one with a seller"""

    def get(self, request):
        conversations = services.list_conversations(request.user_id)
        serializer = ConversationListSerializer(conversations, many=True)
        return Response({
            'user_id': request.user_id,
            'results': serializer.data,
            'total_count': len(conversations)
        })

    def post(self, request):
        data = ContactSellerSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        if data.validated_data.get('product_id'):
            conversation, created = services.contact_seller(
                request.user_id, data.validated_data['product_id'], request.user_email
            )
        else:
            conversation, created = services.find_or_create_conversation(
                request.user_id, data.validated_data['seller_id']
            )

        return Response({
            'message': 'Conversation started' if created else 'Conversation found',
            'conversation': ConversationSerializer(conversation).data,
            'is_new': created
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class ConversationDetailView(APIView):
    def get(self, request, conversation_id):
        conversation = services.get_conversation_for_participant(conversation_id, request.user_id)
        return Response(ConversationSerializer(conversation).data)


class ConversationMessagesView(APIView):
    """Messages of one conversation, oldest first, and sending new ones"""

    def get(self, request, conversation_id):
        conversation = services.get_conversation_for_participant(conversation_id, request.user_id)
        messages = ConversationMessage.objects.filter(conversation=conversation).order_by('created_at', 'id')

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(messages, request, view=self)
        names = resolve_display_names(m.sender_id for m in page)
        serializer = ConversationMessageSerializer(page, many=True, context={'display_names': names})
        return paginator.get_paginated_response(serializer.data)

    def post(self, request, conversation_id):
        data = SendMessageSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        message = services.send_message(
            conversation_id,
            request.user_id,
            data.validated_data['message'],
            sender_email=request.user_email,
        )
        return Response(ConversationMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class MentionProductView(APIView):
    def post(self, request, conversation_id):
        data = MentionProductSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        message = services.mention_product(
            conversation_id,
            request.user_id,
            data.validated_data['product_id'],
            sender_email=request.user_email,
        )
        return Response(ConversationMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class MarkConversationReadView(APIView):
    def post(self, request, conversation_id):
        updated = services.mark_conversation_read(conversation_id, request.user_id)
        return Response({'success': True, 'messages_marked_read': updated})
