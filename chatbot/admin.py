from django.contrib import admin
from .models import ChatbotExchange


@admin.register(ChatbotExchange)
class ChatbotExchangeAdmin(admin.ModelAdmin):
    list_display = ("user_id", "session_id", "message", "created_at")
    search_fields = ("user_id", "message")
