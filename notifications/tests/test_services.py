from decimal import Decimal

from django.test import TestCase

from conversations import services as conversation_services
from conversations.models import ConversationMessage
from marketplace.exceptions import NotParticipantError, ValidationFailed
from negotiations import services as negotiation_services
from notifications import services
from products.models import Product


class NotificationServicesTest(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Road Bike", price=Decimal("500.00"), seller_id="seller-1")
        self.conversation, _ = conversation_services.contact_seller("buyer-1", self.product.pk)
        self.incoming = conversation_services.send_message(self.conversation.pk, "buyer-1", "Still available?")
        conversation_services.send_message(self.conversation.pk, "seller-1", "Yes")
        self.negotiation = negotiation_services.propose_price(
            self.product.pk, "buyer-1", "seller-1", self.product.price, "450"
        )

    def test_compute_for_seller(self):
        feed = services.compute_notifications("seller-1")

        self.assertEqual({n.id for n in feed.notifications}, {f"msg-{self.incoming.pk}", f"neg-{self.negotiation.pk}"})
        self.assertEqual(feed.unread_count, 2)

    def test_resolution_notifies_buyer(self):
        negotiation_services.resolve_negotiation(self.negotiation.pk, 'reject', "seller-1")

        buyer_feed = services.compute_notifications("buyer-1")
        seller_feed = services.compute_notifications("seller-1")

        self.assertIn("Negotiation Update", [n.title for n in buyer_feed.notifications])
        self.assertNotIn(f"neg-{self.negotiation.pk}", [n.id for n in seller_feed.notifications])

    def test_mark_message_notification_read(self):
        self.assertTrue(services.mark_notification_read("seller-1", f"msg-{self.incoming.pk}"))
        self.assertEqual(services.compute_notifications("seller-1").unread_count, 1)

    def test_sender_cannot_mark_own_message(self):
        self.assertFalse(services.mark_notification_read("buyer-1", f"msg-{self.incoming.pk}"))
        self.assertFalse(ConversationMessage.objects.get(pk=self.incoming.pk).is_read)

    def test_stranger_cannot_mark(self):
        with self.assertRaises(NotParticipantError):
            services.mark_notification_read("stranger", f"msg-{self.incoming.pk}")

    def test_negotiation_notification_has_no_read_flag(self):
        self.assertFalse(services.mark_notification_read("seller-1", f"neg-{self.negotiation.pk}"))
        self.assertIn(
            f"neg-{self.negotiation.pk}", [n.id for n in services.compute_notifications("seller-1").notifications]
        )

    def test_unknown_notification_id(self):
        for notification_id in ["bogus", "msg-", "msg-abc", "cart-1"]:
            with self.subTest(notification_id=notification_id), self.assertRaises(ValidationFailed):
                services.mark_notification_read("seller-1", notification_id)

    def test_mark_all(self):
        services.mark_all_notifications_read("seller-1")
        feed = services.compute_notifications("seller-1")
        self.assertEqual([n.id for n in feed.notifications], [f"neg-{self.negotiation.pk}"])
