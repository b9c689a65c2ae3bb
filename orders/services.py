"""
Checkout: turn the caller's cart into an order and take payment.

The order and its items are written before payment is attempted, so a failed
payment leaves a ``failed`` order behind and the cart untouched. A successful
payment completes the order and removes the purchased rows from the cart.
"""

import logging

from django.db import transaction

from cart.models import CartItem
from cart.services import cart_items, cart_total
from marketplace.exceptions import PaymentFailedError, ValidationFailed
from products.services import MAX_PRICE
from . import payments
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ('full_name', 'address', 'city', 'state', 'zip_code', 'country')
REQUIRED_SHIPPING_FIELDS = ('full_name', 'address', 'city')


def _clean_shipping(shipping_address):
    shipping_address = shipping_address or {}
    cleaned = {key: str(shipping_address.get(key) or '').strip() for key in SHIPPING_FIELDS}
    if not all(cleaned[key] for key in REQUIRED_SHIPPING_FIELDS):
        raise ValidationFailed('Please fill in all required shipping information')
    return cleaned


def checkout(user_id, shipping_address):
    items = cart_items(user_id)
    if not items:
        raise ValidationFailed('Your cart is empty')
    address = _clean_shipping(shipping_address)
    total = cart_total(items)
    if total > MAX_PRICE:
        raise ValidationFailed('Order total is too large')

    with transaction.atomic():
        order = Order.objects.create(user_id=user_id, total_amount=total, shipping_address=address)
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=item.product,
                product_name=item.product.name,
                quantity=item.quantity,
                price=item.unit_price,
            )
            for item in items
        ])

    result = payments.charge(order)
    if not result.success:
        order.status = Order.FAILED
        order.save(update_fields=['status', 'updated_at'])
        logger.warning("Payment failed for order %s of user %s", order.pk, user_id)
        raise PaymentFailedError()

    with transaction.atomic():
        order.status = Order.COMPLETED
        order.payment_reference = result.reference
        order.save(update_fields=['status', 'payment_reference', 'updated_at'])
        CartItem.objects.filter(pk__in=[item.pk for item in items]).delete()

    logger.info("Order %s completed for user %s: %s", order.pk, user_id, total)
    return order


def list_orders(user_id):
    return list(Order.objects.filter(user_id=user_id).prefetch_related('items'))


def get_order(user_id, order_id):
    return Order.objects.prefetch_related('items').get(pk=order_id, user_id=user_id)
