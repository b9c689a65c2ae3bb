from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from conversations import services
from conversations.bodies import ProductMentionBody, decode_body
from conversations.models import Conversation, ConversationMessage
from marketplace.exceptions import NotParticipantError, SelfDealingError, ValidationFailed
from products.models import Product
from profiles.models import Profile


class FindOrCreateConversationTest(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Laptop Stand", price=Decimal("45.00"), seller_id="seller-1")

    def test_second_call_returns_same_conversation(self):
        first, created = services.find_or_create_conversation("buyer-1", "seller-1", self.product.pk)
        second, created_again = services.find_or_create_conversation("buyer-1", "seller-1", self.product.pk)

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Conversation.objects.count(), 1)

    def test_product_less_conversation_is_separate(self):
        with_product, _ = services.find_or_create_conversation("buyer-1", "seller-1", self.product.pk)
        without_product, created = services.find_or_create_conversation("buyer-1", "seller-1")

        self.assertTrue(created)
        self.assertNotEqual(with_product.pk, without_product.pk)
        self.assertEqual(services.find_or_create_conversation("buyer-1", "seller-1")[0].pk, without_product.pk)

    def test_self_contact_is_rejected(self):
        with self.assertRaises(SelfDealingError):
            services.find_or_create_conversation("seller-1", "seller-1", self.product.pk)
        self.assertEqual(Conversation.objects.count(), 0)

    def test_contact_seller_uses_product_seller(self):
        conversation, created = services.contact_seller("buyer-1", self.product.pk, "buyer@example.com")

        self.assertTrue(created)
        self.assertEqual(conversation.seller_id, "seller-1")
        self.assertEqual(conversation.product_id, self.product.pk)
        self.assertTrue(Profile.objects.filter(user_id="buyer-1").exists())

    def test_contact_own_product_is_rejected(self):
        with self.assertRaises(SelfDealingError):
            services.contact_seller("seller-1", self.product.pk)


class SendMessageTest(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Desk Lamp", price=Decimal("30.00"), seller_id="seller-1")
        self.conversation, _ = services.find_or_create_conversation("buyer-1", "seller-1", self.product.pk)

    def test_last_message_at_follows_newest_message(self):
        messages = [
            services.send_message(self.conversation.pk, "buyer-1", f"message {i}")
            for i in range(3)
        ]
        self.conversation.refresh_from_db()
        self.assertEqual(self.conversation.last_message_at, messages[-1].created_at)

    def test_first_message_creates_profile_from_email(self):
        services.send_message(self.conversation.pk, "buyer-1", "hello", sender_email="jane.doe@example.com")
        services.send_message(self.conversation.pk, "buyer-1", "again", sender_email="jane.doe@example.com")

        profiles = Profile.objects.filter(user_id="buyer-1")
        self.assertEqual(profiles.count(), 1)
        self.assertEqual(profiles.get().full_name, "jane.doe")

    def test_markup_is_stripped(self):
        message = services.send_message(self.conversation.pk, "buyer-1", "<script>x</script><b>hi</b>")
        self.assertNotIn("<", message.message)
        self.assertIn("hi", message.message)

    def test_empty_message_rejected(self):
        with self.assertRaises(ValidationFailed):
            services.send_message(self.conversation.pk, "buyer-1", "   ")
        self.assertEqual(ConversationMessage.objects.count(), 0)

    def test_non_participant_rejected(self):
        with self.assertRaises(NotParticipantError):
            services.send_message(self.conversation.pk, "stranger", "hi")

    def test_unknown_type_rejected(self):
        with self.assertRaises(ValidationFailed):
            services.send_message(self.conversation.pk, "buyer-1", "hi", message_type="sticker")

    def test_mention_product(self):
        message = services.mention_product(self.conversation.pk, "seller-1", self.product.pk)

        body = decode_body(message)
        self.assertIsInstance(body, ProductMentionBody)
        self.assertEqual(body.name, "Desk Lamp")
        self.assertEqual(body.price, "30.00")


class ReadStateTest(TestCase):
    def setUp(self):
        self.first, _ = services.find_or_create_conversation("buyer-1", "seller-1")
        self.second, _ = services.find_or_create_conversation("buyer-2", "seller-1")
        self.from_buyer = services.send_message(self.first.pk, "buyer-1", "Is it available?")
        self.from_seller = services.send_message(self.first.pk, "seller-1", "Yes")
        self.from_other_buyer = services.send_message(self.second.pk, "buyer-2", "Still for sale?")

    def test_mark_conversation_read_only_touches_incoming(self):
        updated = services.mark_conversation_read(self.first.pk, "seller-1")

        self.assertEqual(updated, 1)
        self.from_buyer.refresh_from_db()
        self.from_seller.refresh_from_db()
        self.assertTrue(self.from_buyer.is_read)
        self.assertFalse(self.from_seller.is_read)

    def test_mark_all_read_leaves_own_messages(self):
        updated = services.mark_all_read("seller-1")

        self.assertEqual(updated, 2)
        self.assertFalse(ConversationMessage.objects.get(pk=self.from_seller.pk).is_read)
        self.assertFalse(
            ConversationMessage.objects.filter(sender_id__in=["buyer-1", "buyer-2"], is_read=False).exists()
        )

    def test_mark_all_read_ignores_other_users_conversations(self):
        services.mark_all_read("buyer-2")
        self.assertFalse(ConversationMessage.objects.get(pk=self.from_buyer.pk).is_read)

    def test_mark_message_read(self):
        self.assertFalse(services.mark_message_read(self.from_buyer.pk, "buyer-1"))
        self.assertTrue(services.mark_message_read(self.from_buyer.pk, "seller-1"))
        self.assertFalse(services.mark_message_read(self.from_buyer.pk, "seller-1"))

    def test_mark_message_read_by_stranger(self):
        with self.assertRaises(NotParticipantError):
            services.mark_message_read(self.from_buyer.pk, "buyer-2")

    def test_list_conversations(self):
        conversations = services.list_conversations("seller-1")

        self.assertEqual([c.pk for c in conversations], [self.second.pk, self.first.pk])
        by_id = {c.pk: c for c in conversations}
        self.assertEqual(by_id[self.first.pk].unread_count, 1)
        self.assertEqual(by_id[self.first.pk].counterpart_id, "buyer-1")
        self.assertEqual(by_id[self.second.pk].unread_count, 1)


class SendMessageAtomicityTest(TestCase):
    def setUp(self):
        self.conversation, _ = services.find_or_create_conversation("buyer-1", "seller-1")

    def test_failed_timestamp_update_rolls_back_message(self):
        with mock.patch.object(Conversation.objects, 'filter', side_effect=DatabaseError("update failed")):
            with self.assertRaises(DatabaseError):
                services.send_message(self.conversation.pk, "buyer-1", "Is it still available?")

        self.assertFalse(ConversationMessage.objects.exists())

    def test_system_text_is_stored_verbatim(self):
        notice = "Offer on Salt & Pepper <Mill> accepted"
        message = services.send_message(
            self.conversation.pk, "seller-1", notice, message_type=ConversationMessage.SYSTEM
        )
        self.assertEqual(message.message, notice)

    def test_typed_text_is_still_sanitized(self):
        message = services.send_message(self.conversation.pk, "buyer-1", "<b>bold</b> offer")
        self.assertEqual(message.message, "bold offer")
