"""
Typed message bodies selected by ``message_type``.

``decode_body`` never raises: anything that cannot be read as the declared
variant comes back as a :class:`TextBody` holding the raw message text.
"""

import json
import logging
from dataclasses import asdict, dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextBody:
    text: str
    kind: str = 'text'


@dataclass(frozen=True)
class ProductMentionBody:
    product_id: int
    name: str
    price: str
    image_url: Optional[str] = None
    kind: str = 'product_mention'


@dataclass(frozen=True)
class SystemBody:
    text: str
    negotiation_id: Optional[int] = None
    status: Optional[str] = None
    kind: str = 'system'


MessageBody = Union[TextBody, ProductMentionBody, SystemBody]


def format_price(value) -> str:
    return f"{Decimal(str(value)).quantize(Decimal('0.01'))}"


def product_mention_payload(product) -> dict:
    return {
        'product': {
            'id': product.pk,
            'name': product.name,
            'price': format_price(product.price),
            'image_url': product.image_url,
        }
    }


def _parse_product(payload, raw_text) -> Optional[ProductMentionBody]:
    if payload is None:
        # Older rows carried the mention as JSON text in the message column
        try:
            payload = json.loads(raw_text)
        except (TypeError, ValueError):
            return None
    if not isinstance(payload, dict):
        return None

    product = payload.get('product')
    if not isinstance(product, dict):
        return None

    name = product.get('name')
    if not isinstance(name, str) or not name:
        return None
    try:
        product_id = int(product.get('id'))
        price = format_price(product.get('price'))
    except (TypeError, ValueError, InvalidOperation):
        return None
    if not Decimal(price).is_finite():
        return None

    image_url = product.get('image_url')
    if image_url is not None and not isinstance(image_url, str):
        image_url = None
    return ProductMentionBody(product_id=product_id, name=name, price=price, image_url=image_url)


def decode_body(message) -> MessageBody:
    raw_text = message.message or ''

    if message.message_type == 'product_mention':
        body = _parse_product(message.payload, raw_text)
        if body is None:
            logger.warning("Malformed product mention in message %s", message.pk)
            return TextBody(text=raw_text)
        return body

    if message.message_type == 'system':
        payload = message.payload if isinstance(message.payload, dict) else {}
        negotiation_id = payload.get('negotiation_id')
        if not isinstance(negotiation_id, int):
            negotiation_id = None
        status = payload.get('status')
        return SystemBody(
            text=raw_text,
            negotiation_id=negotiation_id,
            status=status if isinstance(status, str) else None,
        )

    return TextBody(text=raw_text)


def body_to_dict(body: MessageBody) -> dict:
    return asdict(body)
