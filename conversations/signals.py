from django.db.models import Q
from django.db.models.signals import post_save
from django.dispatch import receiver

from conversations.models import Conversation, ConversationMessage
from websocket_chat.feed import INSERT, UPDATE, change_feed

MESSAGES_TABLE = 'conversation_messages'


@receiver(post_save, sender=ConversationMessage)
def record_message_change(sender, instance: ConversationMessage, created: bool, using=None, **kwargs):
    """
    Keep the parent conversation's ``last_message_at`` on the newest message and
    queue the row for the change feed.

    ``send_message`` inserts inside ``transaction.atomic`` so the timestamp
    update commits or rolls back with the row. It never moves
    ``last_message_at`` backwards. Subscribers only see the row once the
    transaction commits.
    """
    if created:
        Conversation.objects.filter(
            Q(pk=instance.conversation_id),
            Q(last_message_at__isnull=True) | Q(last_message_at__lte=instance.created_at),
        ).update(last_message_at=instance.created_at)
        change_feed.publish_on_commit(MESSAGES_TABLE, INSERT, instance, using=using)
    else:
        change_feed.publish_on_commit(MESSAGES_TABLE, UPDATE, instance, using=using)
