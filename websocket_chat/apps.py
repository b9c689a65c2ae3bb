from django.apps import AppConfig


class WebsocketChatConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'websocket_chat'

    def ready(self):
        from conversations.signals import MESSAGES_TABLE
        from .events import broadcast_message
        from .feed import INSERT, change_feed

        # Every committed message reaches its conversation room exactly once
        change_feed.subscribe(MESSAGES_TABLE, lambda event: broadcast_message(event.record), events=[INSERT])
