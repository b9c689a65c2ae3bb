from django.urls import path
from . import views

app_name = 'conversations'

urlpatterns = [
    path('', views.ConversationListView.as_view(), name='conversation-list'),
    path('<int:conversation_id>/', views.ConversationDetailView.as_view(), name='conversation-detail'),
    path('<int:conversation_id>/messages/', views.ConversationMessagesView.as_view(), name='conversation-messages'),
    path('<int:conversation_id>/mention/', views.MentionProductView.as_view(), name='conversation-mention'),
    path('<int:conversation_id>/read/', views.MarkConversationReadView.as_view(), name='conversation-read'),
]
