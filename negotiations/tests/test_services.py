from decimal import Decimal

from django.test import TestCase

from conversations.bodies import SystemBody, decode_body
from conversations.models import Conversation, ConversationMessage
from marketplace.exceptions import (
    InvalidPriceError,
    NegotiationAlreadyResolved,
    NotParticipantError,
    SelfDealingError,
    ValidationFailed,
)
from negotiations import services
from negotiations.models import Negotiation
from notifications.services import compute_notifications
from products.models import Product


class ProposePriceTest(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Vintage Camera", price=Decimal("100.00"), seller_id="seller-1")

    def test_offer_opens_conversation(self):
        negotiation = services.propose_price(self.product.pk, "buyer-1", "seller-1", Decimal("100.00"), "80")

        self.assertEqual(negotiation.status, Negotiation.PENDING)
        self.assertEqual(negotiation.proposed_price, Decimal("80.00"))
        self.assertTrue(
            Conversation.objects.filter(buyer_id="buyer-1", seller_id="seller-1", product=self.product).exists()
        )

    def test_non_positive_or_garbage_price_writes_nothing(self):
        for price in ["0", "-5", "abc", None, "NaN", "Infinity", "0.001", "0.004", "100000000", "1e12"]:
            with self.subTest(price=price), self.assertRaises(InvalidPriceError):
                services.propose_price(self.product.pk, "buyer-1", "seller-1", Decimal("100.00"), price)
        self.assertEqual(Negotiation.objects.count(), 0)
        self.assertEqual(Conversation.objects.count(), 0)

    def test_self_dealing_rejected(self):
        with self.assertRaises(SelfDealingError):
            services.propose_price(self.product.pk, "seller-1", "seller-1", Decimal("100.00"), "80")
        self.assertEqual(Negotiation.objects.count(), 0)

    def test_missing_seller_rejected(self):
        with self.assertRaises(ValidationFailed):
            services.propose_price(self.product.pk, "buyer-1", None, Decimal("100.00"), "80")


class ResolveNegotiationTest(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Vintage Camera", price=Decimal("100.00"), seller_id="seller-1")
        self.negotiation = services.propose_price(
            self.product.pk, "buyer-1", "seller-1", Decimal("100.00"), "80", "Would you take 80?"
        )

    def system_messages(self):
        return ConversationMessage.objects.filter(message_type=ConversationMessage.SYSTEM)

    def test_accept_posts_one_system_message(self):
        """Buyer offers $80 on a $100 product and the seller accepts"""
        services.resolve_negotiation(self.negotiation.pk, 'accept', "seller-1")

        self.negotiation.refresh_from_db()
        self.assertEqual(self.negotiation.status, Negotiation.ACCEPTED)

        messages = list(self.system_messages())
        self.assertEqual(len(messages), 1)
        message = messages[0]
        self.assertIn("$80", message.message)
        self.assertIn("accepted", message.message)
        self.assertEqual(message.sender_id, "seller-1")
        self.assertEqual(message.conversation.buyer_id, "buyer-1")
        self.assertEqual(message.conversation.product_id, self.product.pk)

        body = decode_body(message)
        self.assertEqual(body, SystemBody(text=message.message, negotiation_id=self.negotiation.pk, status='accepted'))

    def test_reject_text(self):
        services.resolve_negotiation(self.negotiation.pk, 'reject', "seller-1")
        message = self.system_messages().get()
        self.assertEqual(
            message.message,
            "Your offer of $80.00 for Vintage Camera has been rejected. You can try making a new offer.",
        )

    def test_second_resolve_is_rejected_without_duplicate(self):
        services.resolve_negotiation(self.negotiation.pk, 'accept', "seller-1")

        with self.assertRaises(NegotiationAlreadyResolved):
            services.resolve_negotiation(self.negotiation.pk, 'reject', "seller-1")

        self.negotiation.refresh_from_db()
        self.assertEqual(self.negotiation.status, Negotiation.ACCEPTED)
        self.assertEqual(self.system_messages().count(), 1)

    def test_resolution_recreates_missing_conversation(self):
        Conversation.objects.all().delete()

        services.resolve_negotiation(self.negotiation.pk, 'accept', "seller-1")

        self.assertEqual(Conversation.objects.count(), 1)
        self.assertEqual(self.system_messages().count(), 1)

    def test_only_seller_can_resolve(self):
        with self.assertRaises(NotParticipantError):
            services.resolve_negotiation(self.negotiation.pk, 'accept', "buyer-1")
        self.negotiation.refresh_from_db()
        self.assertEqual(self.negotiation.status, Negotiation.PENDING)

    def test_unknown_decision(self):
        with self.assertRaises(ValidationFailed):
            services.resolve_negotiation(self.negotiation.pk, 'counter', "seller-1")

    def test_list_by_role(self):
        self.assertEqual([n.pk for n in services.list_negotiations("seller-1", "seller")], [self.negotiation.pk])
        self.assertEqual([n.pk for n in services.list_negotiations("buyer-1", "buyer")], [self.negotiation.pk])
        self.assertEqual(services.list_negotiations("buyer-1", "seller"), [])
        self.assertEqual(services.list_negotiations("seller-1")[0].buyer_name, "User buyer-1")


class ResolutionTextTest(TestCase):
    def test_product_name_is_not_escaped(self):
        product = Product.objects.create(name="Salt & Pepper <Mill>", price=Decimal("40.00"), seller_id="seller-1")
        negotiation = services.propose_price(product.pk, "buyer-1", "seller-1", product.price, "30")

        services.resolve_negotiation(negotiation.pk, 'accept', "seller-1")

        message = ConversationMessage.objects.get(message_type=ConversationMessage.SYSTEM)
        self.assertIn("for Salt & Pepper <Mill> has been accepted", message.message)
        self.assertNotIn("&amp;", message.message)

        feed = compute_notifications("buyer-1")
        self.assertIn("Salt & Pepper <Mill>", feed.notifications[0].text)
