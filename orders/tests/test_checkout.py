from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from cart.models import CartItem
from cart.services import add_to_cart
from marketplace.exceptions import PaymentFailedError, ValidationFailed
from marketplace.jwt_utils import generate_test_token
from negotiations.models import Negotiation
from orders.models import Order, OrderItem
from orders.payments import PaymentResult
from orders.services import checkout, get_order, list_orders
from products.models import Product

SHIPPING = {'full_name': "Ada Buyer", 'address': "1 Main St", 'city': "Springfield"}


class CheckoutTest(TestCase):
    def setUp(self):
        self.lamp = Product.objects.create(name="Desk Lamp", price=Decimal("40.00"), seller_id="seller-1")
        self.mug = Product.objects.create(name="Mug", price=Decimal("8.50"), seller_id="seller-2")

    def test_completes_order_and_clears_cart(self):
        add_to_cart("buyer-1", self.lamp.pk)
        add_to_cart("buyer-1", self.mug.pk, 2)

        order = checkout("buyer-1", SHIPPING)

        self.assertEqual(order.status, Order.COMPLETED)
        self.assertEqual(order.total_amount, Decimal("57.00"))
        self.assertTrue(order.payment_reference.startswith("sim_"))
        self.assertEqual(order.shipping_address['city'], "Springfield")
        self.assertEqual(
            sorted(OrderItem.objects.filter(order=order).values_list('product_name', 'quantity', 'price')),
            [("Desk Lamp", 1, Decimal("40.00")), ("Mug", 2, Decimal("8.50"))],
        )
        self.assertFalse(CartItem.objects.filter(user_id="buyer-1").exists())

    def test_negotiated_price_is_charged(self):
        offer = Negotiation.objects.create(
            product=self.lamp, buyer_id="buyer-1", seller_id="seller-1",
            original_price=Decimal("40.00"), proposed_price=Decimal("35.00"), status=Negotiation.ACCEPTED,
        )
        add_to_cart("buyer-1", self.lamp.pk, 2, negotiation_id=offer.pk)

        order = checkout("buyer-1", SHIPPING)

        self.assertEqual(order.total_amount, Decimal("70.00"))
        self.assertEqual(order.items.get().price, Decimal("35.00"))

    def test_empty_cart(self):
        with self.assertRaises(ValidationFailed) as ctx:
            checkout("buyer-1", SHIPPING)
        self.assertEqual(str(ctx.exception.detail), "Your cart is empty")
        self.assertFalse(Order.objects.exists())

    def test_missing_shipping_fields(self):
        add_to_cart("buyer-1", self.lamp.pk)

        for missing in ('full_name', 'address', 'city'):
            address = dict(SHIPPING, **{missing: "  "})
            with self.assertRaises(ValidationFailed) as ctx:
                checkout("buyer-1", address)
            self.assertEqual(str(ctx.exception.detail), "Please fill in all required shipping information")
        self.assertFalse(Order.objects.exists())
        self.assertTrue(CartItem.objects.filter(user_id="buyer-1").exists())

    def test_failed_payment_keeps_cart(self):
        add_to_cart("buyer-1", self.lamp.pk)

        with patch('orders.services.payments.charge', return_value=PaymentResult(success=False)):
            with self.assertRaises(PaymentFailedError):
                checkout("buyer-1", SHIPPING)

        order = Order.objects.get()
        self.assertEqual(order.status, Order.FAILED)
        self.assertEqual(order.payment_reference, "")
        self.assertTrue(CartItem.objects.filter(user_id="buyer-1").exists())

    def test_order_survives_product_deletion(self):
        add_to_cart("buyer-1", self.lamp.pk)
        order = checkout("buyer-1", SHIPPING)

        self.lamp.delete()

        item = get_order("buyer-1", order.pk).items.get()
        self.assertIsNone(item.product)
        self.assertEqual(item.product_name, "Desk Lamp")

    def test_orders_are_private(self):
        add_to_cart("buyer-1", self.lamp.pk)
        order = checkout("buyer-1", SHIPPING)

        self.assertEqual([o.pk for o in list_orders("buyer-1")], [order.pk])
        self.assertEqual(list_orders("buyer-2"), [])
        with self.assertRaises(Order.DoesNotExist):
            get_order("buyer-2", order.pk)


class OrderViewsTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {generate_test_token('buyer-1')}")
        self.lamp = Product.objects.create(name="Desk Lamp", price=Decimal("40.00"), seller_id="seller-1")

    def test_checkout_then_list(self):
        add_to_cart("buyer-1", self.lamp.pk, 2)

        response = self.client.post(reverse('orders:order-list'), {'shipping_address': SHIPPING}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Order.COMPLETED)
        self.assertEqual(response.data['total_amount'], "80.00")
        self.assertEqual(response.data['shipping_address']['country'], "United States")
        self.assertEqual(len(response.data['items']), 1)

        response = self.client.get(reverse('orders:order-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_count'], 1)

    def test_empty_cart_is_400(self):
        response = self.client.post(reverse('orders:order-list'), {'shipping_address': SHIPPING}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Your cart is empty")

    def test_failed_payment_is_402(self):
        add_to_cart("buyer-1", self.lamp.pk)

        with patch('orders.services.payments.charge', return_value=PaymentResult(success=False)):
            response = self.client.post(reverse('orders:order-list'), {'shipping_address': SHIPPING}, format='json')

        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
        self.assertEqual(response.data['error'], "Failed to place order. Please try again.")

    def test_other_users_order_is_404(self):
        add_to_cart("buyer-1", self.lamp.pk)
        order = checkout("buyer-1", SHIPPING)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {generate_test_token('buyer-2')}")
        response = self.client.get(reverse('orders:order-detail', args=[order.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
