import logging

from django.db.models import Q

from conversations.models import ConversationMessage
from conversations.services import mark_all_read, mark_message_read
from marketplace.exceptions import ValidationFailed
from negotiations.models import Negotiation

from .aggregator import NotificationFeed, build_notifications

logger = logging.getLogger(__name__)


def compute_notifications(user_id: str) -> NotificationFeed:
    messages = (
        ConversationMessage.objects.filter(
            Q(conversation__buyer_id=user_id) | Q(conversation__seller_id=user_id),
            is_read=False,
        )
        .exclude(sender_id=user_id)
        .select_related('conversation__product')
    )
    negotiations = Negotiation.objects.filter(
        seller_id=user_id, status=Negotiation.PENDING
    ).select_related('product')
    return build_notifications(user_id, messages, negotiations)


def _parse_notification_id(notification_id: str):
    kind, _, raw_id = str(notification_id).partition('-')
    if kind not in ('msg', 'neg') or not raw_id.isdigit():
        raise ValidationFailed(f"Unknown notification '{notification_id}'")
    return kind, int(raw_id)


def mark_notification_read(user_id: str, notification_id: str) -> bool:
    """
    Mark the row behind a notification read. Returns whether anything changed.

    Offer notifications stay until the offer is resolved.
    """
    kind, object_id = _parse_notification_id(notification_id)
    if kind == 'neg':
        return False
    return mark_message_read(object_id, user_id)


def mark_all_notifications_read(user_id: str) -> int:
    return mark_all_read(user_id)
