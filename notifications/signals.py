"""Nudge the notification feeds of the users a committed row concerns."""

from websocket_chat.events import notify_notifications_changed


def message_changed(event):
    conversation = event.record.conversation
    notify_notifications_changed([conversation.buyer_id, conversation.seller_id])


def negotiation_changed(event):
    notify_notifications_changed([event.record.buyer_id, event.record.seller_id])
