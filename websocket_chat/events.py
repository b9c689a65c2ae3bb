"""
Channel-layer fan-out for committed changes.

Conversation rooms receive every new message row; per-user notification
groups receive a ``notifications_changed`` nudge and recompute on their side.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def conversation_group(conversation_id):
    return f"conversation_{conversation_id}"


def notification_group(user_id):
    return f"notifications_{user_id}"


def _group_send(group, event):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(group, event)
    except Exception:
        logger.exception("Failed to push %s to %s", event.get('type'), group)


def serialize_message(message):
    from conversations.bodies import body_to_dict, decode_body

    return {
        'id': message.pk,
        'conversation_id': message.conversation_id,
        'sender_id': message.sender_id,
        'message': message.message,
        'message_type': message.message_type,
        'body': body_to_dict(decode_body(message)),
        'is_read': message.is_read,
        'created_at': message.created_at.isoformat(),
    }


def broadcast_message(message):
    _group_send(
        conversation_group(message.conversation_id),
        {'type': 'chat_message', 'message': serialize_message(message)},
    )


def notify_notifications_changed(user_ids):
    for user_id in {uid for uid in user_ids if uid}:
        _group_send(notification_group(user_id), {'type': 'notifications_changed'})
