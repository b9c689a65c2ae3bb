from django.apps import AppConfig


class ConversationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'conversations'

    def ready(self) -> None:
        """
        Register the signal handlers that keep ``last_message_at`` current and
        feed committed message rows into the change feed.
        """
        import conversations.signals  # noqa: F401
