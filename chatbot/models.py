from django.db import models


class ChatbotExchange(models.Model):
    user_id = models.CharField(max_length=100, db_index=True)
    session_id = models.CharField(max_length=100)
    message = models.TextField()
    response = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'chatbot_exchanges'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.user_id}: {self.message[:50]}"
