from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase

from conversations.models import Conversation, ConversationMessage
from products.models import Product


class ConversationModelTest(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Smart Watch", price=Decimal("299.99"), seller_id="seller-1")
        self.conversation = Conversation.objects.create(
            buyer_id="buyer-1", seller_id="seller-1", product=self.product
        )

    def test_conversation_creation(self):
        self.assertEqual(self.conversation.buyer_id, "buyer-1")
        self.assertEqual(self.conversation.seller_id, "seller-1")
        self.assertIsNotNone(self.conversation.created_at)
        self.assertIsNotNone(self.conversation.last_message_at)

    def test_triple_is_unique(self):
        """Only one conversation per (buyer, seller, product)"""
        with self.assertRaises(IntegrityError), transaction.atomic():
            Conversation.objects.create(buyer_id="buyer-1", seller_id="seller-1", product=self.product)

    def test_pair_without_product_is_unique(self):
        Conversation.objects.create(buyer_id="buyer-1", seller_id="seller-1")
        with self.assertRaises(IntegrityError), transaction.atomic():
            Conversation.objects.create(buyer_id="buyer-1", seller_id="seller-1")

    def test_participants(self):
        self.assertTrue(self.conversation.is_participant("buyer-1"))
        self.assertTrue(self.conversation.is_participant("seller-1"))
        self.assertFalse(self.conversation.is_participant("stranger"))
        self.assertEqual(self.conversation.counterpart_of("buyer-1"), "seller-1")
        self.assertEqual(self.conversation.counterpart_of("seller-1"), "buyer-1")


class ConversationMessageModelTest(TestCase):
    def setUp(self):
        self.conversation = Conversation.objects.create(buyer_id="buyer-1", seller_id="seller-1")
        self.message = ConversationMessage.objects.create(
            conversation=self.conversation,
            sender_id="buyer-1",
            message="Is this still available?"
        )

    def test_message_defaults(self):
        self.assertEqual(self.message.message_type, ConversationMessage.TEXT)
        self.assertFalse(self.message.is_read)
        self.assertIsNone(self.message.payload)

    def test_insert_moves_last_message_at(self):
        """The parent conversation tracks the newest message without the caller touching it"""
        self.conversation.refresh_from_db()
        self.assertEqual(self.conversation.last_message_at, self.message.created_at)

    def test_message_ordering(self):
        second = ConversationMessage.objects.create(
            conversation=self.conversation, sender_id="seller-1", message="Yes it is"
        )
        self.assertEqual(list(self.conversation.messages.all()), [self.message, second])

    def test_str_representation(self):
        self.assertEqual(str(self.message), "buyer-1: Is this still available?...")
