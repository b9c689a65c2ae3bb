from typing import Dict

from django.conf import settings
from django.core.paginator import Paginator

from conversations.bodies import body_to_dict, decode_body
from conversations.models import ConversationMessage
from conversations.services import get_conversation_for_participant
from profiles.services import resolve_display_names


class ChatService:
    """
    Service layer for chat history and conversation info
    """

    @staticmethod
    def get_conversation_messages(conversation_id, user_id: str, page: int = 1, page_size: int = None) -> Dict:
        """
        Get paginated messages for a conversation.

        Page 1 holds the newest messages; each page is returned oldest first.
        """
        conversation = get_conversation_for_participant(conversation_id, user_id)
        page_size = max(1, min(page_size or settings.MESSAGE_PAGE_SIZE, 100))

        messages = ConversationMessage.objects.filter(conversation=conversation).order_by('-created_at', '-id')
        paginator = Paginator(messages, page_size)
        page_obj = paginator.get_page(page)

        page_messages = list(reversed(page_obj.object_list))
        names = resolve_display_names(m.sender_id for m in page_messages)

        message_data = []
        for message in page_messages:
            message_data.append({
                'id': message.id,
                'sender_id': message.sender_id,
                'sender_name': names.get(message.sender_id),
                'message': message.message,
                'message_type': message.message_type,
                'body': body_to_dict(decode_body(message)),
                'created_at': message.created_at.isoformat(),
                'is_read': message.is_read,
            })

        return {
            'messages': message_data,
            'pagination': {
                'current_page': page_obj.number,
                'total_pages': paginator.num_pages,
                'total_messages': paginator.count,
                'has_next': page_obj.has_next(),
                'has_previous': page_obj.has_previous(),
                'next_page': page_obj.next_page_number() if page_obj.has_next() else None,
                'previous_page': page_obj.previous_page_number() if page_obj.has_previous() else None
            }
        }

    @staticmethod
    def get_conversation_info(conversation_id, user_id: str) -> Dict:
        conversation = get_conversation_for_participant(conversation_id, user_id)
        names = resolve_display_names([conversation.buyer_id, conversation.seller_id])

        return {
            'conversation_id': conversation.pk,
            'buyer': {'user_id': conversation.buyer_id, 'name': names.get(conversation.buyer_id)},
            'seller': {'user_id': conversation.seller_id, 'name': names.get(conversation.seller_id)},
            'product_id': conversation.product_id,
            'product_name': conversation.product.name if conversation.product_id else None,
            'created_at': conversation.created_at.isoformat(),
            'last_message_at': conversation.last_message_at.isoformat() if conversation.last_message_at else None,
            'unread_count': ChatService.get_unread_message_count(conversation, user_id),
        }

    @staticmethod
    def get_unread_message_count(conversation, user_id: str) -> int:
        """
        Get count of unread messages addressed to a user in a conversation
        """
        return ConversationMessage.objects.filter(
            conversation=conversation,
            is_read=False
        ).exclude(sender_id=user_id).count()
