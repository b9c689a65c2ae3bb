import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F

from marketplace.exceptions import ValidationFailed
from negotiations.models import Negotiation
from products.models import Product
from .models import CartItem

logger = logging.getLogger(__name__)


def _parse_quantity(value):
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed('Quantity must be a whole number')
    if quantity < 1:
        raise ValidationFailed('Quantity must be at least 1')
    return quantity


def _accepted_offer(negotiation_id, user_id, product):
    negotiation = Negotiation.objects.get(pk=negotiation_id)
    if (negotiation.buyer_id != user_id or negotiation.product_id != product.pk
            or negotiation.status != Negotiation.ACCEPTED):
        raise ValidationFailed('Only your accepted offers for this product can be added to the cart')
    return negotiation


def add_to_cart(user_id, product_id, quantity=1, negotiation_id=None):
    """
    Put a product in the caller's cart.

    Returns ``(item, created)``. Adding a product that is already in the cart
    raises its quantity; a concurrent first add that loses the unique
    (user, product) race does the same to the winner's row.
    """
    quantity = _parse_quantity(quantity)
    product = Product.objects.get(pk=product_id)
    negotiation = _accepted_offer(negotiation_id, user_id, product) if negotiation_id is not None else None

    item = CartItem.objects.filter(user_id=user_id, product=product).first()
    if item is None:
        try:
            with transaction.atomic():
                item = CartItem.objects.create(
                    user_id=user_id, product=product, quantity=quantity, negotiation=negotiation
                )
            logger.info("User %s added product %s to cart", user_id, product.pk)
            return item, True
        except IntegrityError:
            logger.debug("Cart row for %s and %s already exists, adding to it", user_id, product.pk)
            item = CartItem.objects.get(user_id=user_id, product=product)

    item.quantity = F('quantity') + quantity
    fields = ['quantity', 'updated_at']
    if negotiation is not None:
        item.negotiation = negotiation
        fields.append('negotiation')
    item.save(update_fields=fields)
    item.refresh_from_db()
    return item, False


def _own_item(user_id, item_id):
    return CartItem.objects.select_related('product', 'negotiation').get(pk=item_id, user_id=user_id)


def update_quantity(user_id, item_id, quantity):
    item = _own_item(user_id, item_id)
    item.quantity = _parse_quantity(quantity)
    item.save(update_fields=['quantity', 'updated_at'])
    return item


def remove_from_cart(user_id, item_id):
    _own_item(user_id, item_id).delete()


def clear_cart(user_id):
    deleted, _ = CartItem.objects.filter(user_id=user_id).delete()
    return deleted


def cart_items(user_id):
    return list(CartItem.objects.filter(user_id=user_id).select_related('product', 'negotiation'))


def cart_total(items):
    return sum((item.line_total for item in items), Decimal('0.00'))
