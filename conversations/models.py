from django.db import models
from django.db.models import Q
from django.utils import timezone


class Conversation(models.Model):
    buyer_id = models.CharField(max_length=100, db_index=True)
    seller_id = models.CharField(max_length=100, db_index=True)
    product = models.ForeignKey(
        'products.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='conversations'
    )
    last_message_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'conversations'
        constraints = [
            models.UniqueConstraint(
                fields=['buyer_id', 'seller_id', 'product'],
                name='unique_conversation_per_product',
            ),
            models.UniqueConstraint(
                fields=['buyer_id', 'seller_id'],
                condition=Q(product__isnull=True),
                name='unique_conversation_without_product',
            ),
        ]

    def __str__(self):
        return f"Conversation {self.pk} ({self.buyer_id} -> {self.seller_id})"

    def is_participant(self, user_id):
        return user_id in (self.buyer_id, self.seller_id)

    def counterpart_of(self, user_id):
        return self.seller_id if user_id == self.buyer_id else self.buyer_id


class ConversationMessage(models.Model):
    TEXT = 'text'
    PRODUCT_MENTION = 'product_mention'
    SYSTEM = 'system'
    MESSAGE_TYPE_CHOICES = [
        (TEXT, 'Text'),
        (PRODUCT_MENTION, 'Product mention'),
        (SYSTEM, 'System'),
    ]

    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender_id = models.CharField(max_length=100)
    message = models.TextField()
    message_type = models.CharField(max_length=20, choices=MESSAGE_TYPE_CHOICES, default=TEXT)
    payload = models.JSONField(null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'conversation_messages'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='conv_messages_created_idx'),
            models.Index(fields=['is_read', 'sender_id'], name='conv_messages_unread_idx'),
        ]

    def __str__(self):
        return f"{self.sender_id}: {self.message[:50]}..."
