from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'notifications'

    def ready(self) -> None:
        from conversations.signals import MESSAGES_TABLE
        from negotiations.signals import NEGOTIATIONS_TABLE
        from websocket_chat.feed import change_feed
        from .signals import message_changed, negotiation_changed

        change_feed.subscribe(MESSAGES_TABLE, message_changed)
        change_feed.subscribe(NEGOTIATIONS_TABLE, negotiation_changed)
