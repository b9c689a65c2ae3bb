from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from conversations import services as conversation_services
from marketplace.jwt_utils import generate_test_token
from products.models import Product


class NotificationViewsTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {generate_test_token('seller-1')}")
        product = Product.objects.create(name="Mirror", price=Decimal("40.00"), seller_id="seller-1")
        conversation, _ = conversation_services.contact_seller("buyer-1", product.pk)
        self.message = conversation_services.send_message(conversation.pk, "buyer-1", "Hi there")

    def test_list(self):
        response = self.client.get(reverse('notifications:notification-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unread_count'], 1)
        self.assertEqual(response.data['notifications'][0]['text'], 'New message about Mirror')

    def test_mark_one_read(self):
        response = self.client.post(
            reverse('notifications:notification-read', args=[f"msg-{self.message.pk}"])
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['changed'])
        self.assertEqual(self.client.get(reverse('notifications:notification-list')).data['unread_count'], 0)

    def test_mark_unknown_is_400(self):
        response = self.client.post(reverse('notifications:notification-read', args=["nope"]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_all_read(self):
        response = self.client.post(reverse('notifications:notification-read-all'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['messages_marked_read'], 1)
