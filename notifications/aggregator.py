"""
Notification feed derived from current message and negotiation rows.

Nothing here touches the database: callers hand in snapshots and get back a
fresh :class:`NotificationFeed`. Recomputing from scratch on every change keeps
the feed from drifting away from the rows it describes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from conversations.bodies import decode_body, format_price

MESSAGE = 'message'
NEGOTIATION = 'negotiation'


@dataclass(frozen=True)
class Notification:
    id: str
    type: str
    title: str
    text: str
    created_at: datetime
    is_read: bool
    conversation_id: Optional[int] = None
    negotiation_id: Optional[int] = None
    product_name: Optional[str] = None


@dataclass
class NotificationFeed:
    notifications: List[Notification] = field(default_factory=list)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)


def _product_name(product) -> Optional[str]:
    return product.name if product is not None else None


def message_notification(message) -> Notification:
    conversation = message.conversation
    product_name = _product_name(conversation.product)

    if message.message_type == 'system':
        return Notification(
            id=f"msg-{message.pk}",
            type=NEGOTIATION,
            title="Negotiation Update",
            text=message.message,
            created_at=message.created_at,
            is_read=message.is_read,
            conversation_id=conversation.pk,
            negotiation_id=getattr(decode_body(message), 'negotiation_id', None),
            product_name=product_name,
        )

    return Notification(
        id=f"msg-{message.pk}",
        type=MESSAGE,
        title="New Message",
        text=f"New message about {product_name or 'a product'}",
        created_at=message.created_at,
        is_read=message.is_read,
        conversation_id=conversation.pk,
        product_name=product_name,
    )


def negotiation_notification(negotiation) -> Notification:
    product_name = _product_name(negotiation.product) or 'a product'
    # Pending offers have no read flag of their own
    return Notification(
        id=f"neg-{negotiation.pk}",
        type=NEGOTIATION,
        title="New Price Negotiation",
        text=f"New offer for {product_name}: ${format_price(negotiation.proposed_price)}",
        created_at=negotiation.created_at,
        is_read=False,
        negotiation_id=negotiation.pk,
        product_name=product_name,
    )


def build_notifications(user_id: str, messages: Iterable, negotiations: Iterable) -> NotificationFeed:
    """
    Unread incoming messages in the user's conversations plus pending offers on
    the user's products, newest first.
    """
    notifications = []

    for message in messages:
        conversation = message.conversation
        if user_id not in (conversation.buyer_id, conversation.seller_id):
            continue
        if message.sender_id == user_id or message.is_read:
            continue
        notifications.append(message_notification(message))

    for negotiation in negotiations:
        if negotiation.seller_id != user_id or negotiation.status != 'pending':
            continue
        notifications.append(negotiation_notification(negotiation))

    notifications.sort(key=lambda n: (n.created_at, n.id), reverse=True)
    return NotificationFeed(notifications=notifications)
