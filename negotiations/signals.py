from django.db.models.signals import post_save
from django.dispatch import receiver

from negotiations.models import Negotiation
from websocket_chat.feed import INSERT, UPDATE, change_feed

NEGOTIATIONS_TABLE = 'negotiations'


@receiver(post_save, sender=Negotiation)
def record_negotiation_change(sender, instance: Negotiation, created: bool, using=None, **kwargs):
    change_feed.publish_on_commit(NEGOTIATIONS_TABLE, INSERT if created else UPDATE, instance, using=using)
