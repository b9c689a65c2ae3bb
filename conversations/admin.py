from django.contrib import admin
from .models import Conversation, ConversationMessage


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['id', 'buyer_id', 'seller_id', 'product', 'created_at', 'last_message_at']
    list_filter = ['created_at']
    search_fields = ['buyer_id', 'seller_id', 'product__name']
    readonly_fields = ['created_at', 'last_message_at']


@admin.register(ConversationMessage)
class ConversationMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender_id', 'message_type', 'content_preview', 'created_at', 'is_read']
    list_filter = ['message_type', 'is_read', 'created_at']
    search_fields = ['message', 'sender_id']
    readonly_fields = ['created_at']

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        return obj.message[:50] + "..." if len(obj.message) > 50 else obj.message
