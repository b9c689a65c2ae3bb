import json
from decimal import Decimal

from django.test import SimpleTestCase

from conversations.bodies import (
    ProductMentionBody,
    SystemBody,
    TextBody,
    body_to_dict,
    decode_body,
    product_mention_payload,
)
from conversations.models import ConversationMessage
from products.models import Product


def make_message(message_type, message="", payload=None):
    return ConversationMessage(pk=1, message_type=message_type, message=message, payload=payload)


class DecodeBodyTest(SimpleTestCase):
    def test_text(self):
        body = decode_body(make_message('text', 'hello'))
        self.assertEqual(body, TextBody(text='hello'))

    def test_product_mention_from_payload(self):
        product = Product(pk=7, name="Running Shoes", price=Decimal("129.9"), image_url="https://img/shoe.jpg")
        message = make_message('product_mention', 'Mentioned Running Shoes', product_mention_payload(product))

        body = decode_body(message)

        self.assertIsInstance(body, ProductMentionBody)
        self.assertEqual(body.product_id, 7)
        self.assertEqual(body.name, "Running Shoes")
        self.assertEqual(body.price, "129.90")
        self.assertEqual(body.image_url, "https://img/shoe.jpg")

    def test_product_mention_from_legacy_json_text(self):
        raw = json.dumps({
            'type': 'product_mention',
            'product': {'id': 3, 'name': 'Coffee Maker', 'price': 89.99, 'image_url': None},
        })
        body = decode_body(make_message('product_mention', raw))
        self.assertEqual(body, ProductMentionBody(product_id=3, name='Coffee Maker', price='89.99'))

    def test_malformed_product_mention_degrades_to_text(self):
        """Unreadable payloads render as the raw message instead of failing"""
        cases = [
            make_message('product_mention', '{not json'),
            make_message('product_mention', 'plain words', {'product': 'nope'}),
            make_message('product_mention', 'missing name', {'product': {'id': 1, 'price': 5}}),
            make_message('product_mention', 'bad price', {'product': {'id': 1, 'name': 'X', 'price': 'abc'}}),
            make_message('product_mention', 'bad id', {'product': {'id': 'x', 'name': 'X', 'price': 1}}),
            make_message('product_mention', 'nan price', {'product': {'id': 1, 'name': 'X', 'price': 'NaN'}}),
            make_message('product_mention', '[1, 2]'),
        ]
        for message in cases:
            with self.subTest(raw=message.message):
                self.assertEqual(decode_body(message), TextBody(text=message.message))

    def test_system_body(self):
        message = make_message('system', 'Offer accepted', {'negotiation_id': 4, 'status': 'accepted'})
        self.assertEqual(
            decode_body(message),
            SystemBody(text='Offer accepted', negotiation_id=4, status='accepted'),
        )

    def test_system_body_without_payload(self):
        self.assertEqual(decode_body(make_message('system', 'Notice')), SystemBody(text='Notice'))

    def test_body_to_dict_carries_kind(self):
        self.assertEqual(body_to_dict(TextBody(text='hi')), {'text': 'hi', 'kind': 'text'})
