"""
Conversation store and message channel operations.

Participant checks here stand in for the row-level policies of the storage
layer: only the buyer and the seller of a conversation can read it, post to it
or flip read flags in it.
"""

import logging
from typing import Callable, List, Optional, Tuple

import bleach
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q

from marketplace.exceptions import NotParticipantError, SelfDealingError, ValidationFailed
from products.models import Product
from profiles.services import ensure_profile, resolve_display_names
from websocket_chat.events import notify_notifications_changed
from websocket_chat.feed import INSERT, Subscription, change_feed

from .bodies import product_mention_payload
from .models import Conversation, ConversationMessage
from .signals import MESSAGES_TABLE

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


def find_or_create_conversation(buyer_id: str, seller_id: str, product_id=None) -> Tuple[Conversation, bool]:
    """
    Return the conversation for (buyer, seller, product), creating it if needed.

    Returns ``(conversation, created)``. Self-contact is rejected before any
    write. A concurrent creator winning the unique constraint is not an error:
    its row is read back and reused.
    """
    if not buyer_id or not seller_id:
        raise ValidationFailed('Buyer and seller are required')
    if buyer_id == seller_id:
        raise SelfDealingError()

    product = None
    if product_id is not None:
        product = Product.objects.get(pk=product_id)

    lookup = {'buyer_id': buyer_id, 'seller_id': seller_id}
    if product is None:
        lookup['product__isnull'] = True
    else:
        lookup['product'] = product

    conversation = Conversation.objects.filter(**lookup).first()
    if conversation:
        return conversation, False

    try:
        with transaction.atomic():
            conversation = Conversation.objects.create(buyer_id=buyer_id, seller_id=seller_id, product=product)
    except IntegrityError:
        logger.debug("Conversation %s/%s/%s already exists, reusing it", buyer_id, seller_id, product_id)
        return Conversation.objects.get(**lookup), False

    logger.info("Started conversation %s between %s and %s", conversation.pk, buyer_id, seller_id)
    return conversation, True


def contact_seller(buyer_id: str, product_id, buyer_email: Optional[str] = None) -> Tuple[Conversation, bool]:
    """Start (or reopen) the conversation about a product with its seller."""
    product = Product.objects.get(pk=product_id)
    if not product.seller_id:
        raise ValidationFailed("This product doesn't have a seller assigned")
    ensure_profile(buyer_id, buyer_email)
    return find_or_create_conversation(buyer_id, product.seller_id, product.pk)


def get_conversation_for_participant(conversation_id, user_id: str) -> Conversation:
    conversation = Conversation.objects.select_related('product').get(pk=conversation_id)
    if not conversation.is_participant(user_id):
        raise NotParticipantError()
    return conversation


def list_conversations(user_id: str) -> List[Conversation]:
    """
    Conversations the user takes part in, newest activity first.

    Each conversation is annotated with ``unread_count`` and carries
    ``counterpart_id``, ``counterpart_name`` and ``product_name`` attributes.
    """
    conversations = list(
        Conversation.objects.filter(Q(buyer_id=user_id) | Q(seller_id=user_id))
        .select_related('product')
        .annotate(
            unread_count=Count(
                'messages',
                filter=Q(messages__is_read=False) & ~Q(messages__sender_id=user_id),
            )
        )
        .order_by(F('last_message_at').desc(nulls_last=True), '-created_at')
    )

    names = resolve_display_names(c.counterpart_of(user_id) for c in conversations)
    for conversation in conversations:
        conversation.counterpart_id = conversation.counterpart_of(user_id)
        conversation.counterpart_name = names.get(conversation.counterpart_id)
        conversation.product_name = conversation.product.name if conversation.product else None
    return conversations


def sanitize_message(content: str) -> str:
    """Strip markup from free text to prevent XSS"""
    return bleach.clean(content, tags=[], attributes={}, strip=True)


def send_message(
    conversation_id,
    sender_id: str,
    body: str,
    message_type: str = ConversationMessage.TEXT,
    payload: Optional[dict] = None,
    sender_email: Optional[str] = None,
) -> ConversationMessage:
    """
    Append a message to a conversation.

    The parent conversation's ``last_message_at`` is moved by the storage layer
    (see ``conversations.signals``) and subscribers are notified on commit.
    """
    valid_types = {choice for choice, _ in ConversationMessage.MESSAGE_TYPE_CHOICES}
    if message_type not in valid_types:
        raise ValidationFailed(f"Unknown message type '{message_type}'")

    text = (body or '').strip()
    if message_type == ConversationMessage.TEXT:
        # Only typed text is user markup; mention and system text is composed here
        text = sanitize_message(text)
    if not text:
        raise ValidationFailed('Message content cannot be empty')
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationFailed(f'Message cannot exceed {MAX_MESSAGE_LENGTH} characters')

    conversation = get_conversation_for_participant(conversation_id, sender_id)
    ensure_profile(sender_id, sender_email)

    # The insert and the last_message_at update in its post_save handler commit together
    with transaction.atomic():
        message = ConversationMessage.objects.create(
            conversation=conversation,
            sender_id=sender_id,
            message=text,
            message_type=message_type,
            payload=payload,
        )
    logger.debug("Message %s (%s) appended to conversation %s", message.pk, message_type, conversation.pk)
    return message


def mention_product(conversation_id, sender_id: str, product_id, sender_email: Optional[str] = None) -> ConversationMessage:
    product = Product.objects.get(pk=product_id)
    return send_message(
        conversation_id,
        sender_id,
        f"Mentioned {product.name}",
        message_type=ConversationMessage.PRODUCT_MENTION,
        payload=product_mention_payload(product),
        sender_email=sender_email,
    )


def _after_read(user_id: str):
    transaction.on_commit(lambda: notify_notifications_changed([user_id]))


def mark_conversation_read(conversation_id, user_id: str) -> int:
    """Mark every message addressed to ``user_id`` in one conversation as read."""
    conversation = get_conversation_for_participant(conversation_id, user_id)
    updated = (
        ConversationMessage.objects.filter(conversation=conversation, is_read=False)
        .exclude(sender_id=user_id)
        .update(is_read=True)
    )
    if updated:
        _after_read(user_id)
    return updated


def mark_all_read(user_id: str) -> int:
    """Mark every message not sent by ``user_id`` in the user's conversations as read."""
    updated = (
        ConversationMessage.objects.filter(
            Q(conversation__buyer_id=user_id) | Q(conversation__seller_id=user_id),
            is_read=False,
        )
        .exclude(sender_id=user_id)
        .update(is_read=True)
    )
    if updated:
        _after_read(user_id)
    logger.info("Marked %s messages read for %s", updated, user_id)
    return updated


def mark_message_read(message_id, user_id: str) -> bool:
    """Flip one message to read if ``user_id`` is its addressee. Returns whether it changed."""
    message = ConversationMessage.objects.select_related('conversation').get(pk=message_id)
    if not message.conversation.is_participant(user_id):
        raise NotParticipantError()
    if message.sender_id == user_id or message.is_read:
        return False
    updated = ConversationMessage.objects.filter(pk=message.pk, is_read=False).update(is_read=True)
    if updated:
        _after_read(user_id)
    return bool(updated)


def subscribe(conversation_id, on_insert: Callable[[ConversationMessage], None]) -> Subscription:
    """
    Call ``on_insert`` once per message committed to the conversation, in
    commit order, until the returned subscription is cancelled.
    """
    return change_feed.subscribe(
        MESSAGES_TABLE,
        lambda event: on_insert(event.record),
        filters={'conversation_id': conversation_id},
        events=[INSERT],
    )
