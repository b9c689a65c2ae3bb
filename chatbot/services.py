import logging
import uuid
from typing import List, Optional

from marketplace.exceptions import ValidationFailed
from .models import ChatbotExchange
from .replies import reply_to

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20


def ask(user_id: str, message: str, session_id: Optional[str] = None) -> ChatbotExchange:
    text = (message or '').strip()
    if not text:
        raise ValidationFailed('Message content cannot be empty')

    exchange = ChatbotExchange.objects.create(
        user_id=user_id,
        session_id=session_id or f"session_{uuid.uuid4().hex}",
        message=text,
        response=reply_to(text),
    )
    logger.debug("Chatbot exchange %s stored for %s", exchange.pk, user_id)
    return exchange


def history(user_id: str, limit: int = HISTORY_LIMIT) -> List[ChatbotExchange]:
    """The user's most recent exchanges, oldest first."""
    recent = ChatbotExchange.objects.filter(user_id=user_id).order_by('-created_at', '-id')[:limit]
    return list(reversed(recent))
