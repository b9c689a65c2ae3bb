from django.urls import path
from . import views

app_name = 'websocket_chat'

urlpatterns = [
    path('conversations/<int:conversation_id>/messages/',
         views.ConversationMessagesHistoryView.as_view(),
         name='conversation_messages_history'),
    path('conversations/<int:conversation_id>/info/',
         views.ConversationInfoView.as_view(),
         name='conversation_info'),
]
