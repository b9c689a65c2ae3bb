"""
Price negotiation workflow.

A buyer proposes a price on a product; the seller accepts or rejects it once.
Resolving a negotiation always leaves exactly one system message in the
buyer/seller conversation about that product.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from django.db import transaction

from conversations.bodies import format_price
from conversations.models import ConversationMessage
from conversations.services import find_or_create_conversation, send_message
from marketplace.exceptions import (
    NegotiationAlreadyResolved,
    NotParticipantError,
    SelfDealingError,
    ValidationFailed,
)
from products.models import Product
from products.services import parse_price
from profiles.services import resolve_display_names

from .models import Negotiation

logger = logging.getLogger(__name__)

ACCEPT = 'accept'
REJECT = 'reject'
DECISIONS = {ACCEPT: Negotiation.ACCEPTED, REJECT: Negotiation.REJECTED}

ACCEPTED_TEMPLATE = (
    "Great news! Your offer of ${price} for {product} has been accepted! "
    "You can now add it to your cart at the negotiated price."
)
REJECTED_TEMPLATE = "Your offer of ${price} for {product} has been rejected. You can try making a new offer."


def propose_price(product_id, buyer_id: str, seller_id: Optional[str], original_price, proposed_price,
                  note: str = '') -> Negotiation:
    """
    Record a buyer's offer. Nothing is written when validation fails.

    The buyer/seller conversation for the product is found or created so the
    eventual resolution has somewhere to land.
    """
    price = parse_price(proposed_price)
    if not seller_id:
        raise ValidationFailed("This product doesn't have a seller assigned")
    if buyer_id == seller_id:
        raise SelfDealingError()

    product = Product.objects.get(pk=product_id)
    original = Decimal(str(original_price if original_price is not None else product.price))

    with transaction.atomic():
        negotiation = Negotiation.objects.create(
            product=product,
            buyer_id=buyer_id,
            seller_id=seller_id,
            original_price=original,
            proposed_price=price,
            message=(note or '').strip(),
        )
        find_or_create_conversation(buyer_id, seller_id, product.pk)

    logger.info("Negotiation %s opened: %s offers %s on product %s", negotiation.pk, buyer_id, price, product.pk)
    return negotiation


def resolution_text(negotiation: Negotiation) -> str:
    template = ACCEPTED_TEMPLATE if negotiation.status == Negotiation.ACCEPTED else REJECTED_TEMPLATE
    return template.format(price=format_price(negotiation.proposed_price), product=negotiation.product.name)


def resolve_negotiation(negotiation_id, decision: str, acting_user_id: str) -> Negotiation:
    """
    Accept or reject a pending negotiation as its seller.

    One-shot: a negotiation that is no longer pending raises
    :class:`NegotiationAlreadyResolved` and nothing is written. The status
    change and the system message commit together.
    """
    if decision not in DECISIONS:
        raise ValidationFailed(f"Decision must be one of: {', '.join(sorted(DECISIONS))}")

    with transaction.atomic():
        negotiation = (
            Negotiation.objects.select_for_update()
            .select_related('product')
            .get(pk=negotiation_id)
        )
        if negotiation.seller_id != acting_user_id:
            raise NotParticipantError('Only the seller can respond to this offer')
        if not negotiation.is_pending:
            raise NegotiationAlreadyResolved(f"Negotiation has already been {negotiation.status}")

        negotiation.status = DECISIONS[decision]
        negotiation.save(update_fields=['status', 'updated_at'])

        conversation, _ = find_or_create_conversation(
            negotiation.buyer_id, negotiation.seller_id, negotiation.product_id
        )
        send_message(
            conversation.pk,
            negotiation.seller_id,
            resolution_text(negotiation),
            message_type=ConversationMessage.SYSTEM,
            payload={
                'negotiation_id': negotiation.pk,
                'status': negotiation.status,
                'proposed_price': format_price(negotiation.proposed_price),
            },
        )

    logger.info("Negotiation %s %s by %s", negotiation.pk, negotiation.status, acting_user_id)
    return negotiation


def list_negotiations(user_id: str, role: str = 'seller') -> List[Negotiation]:
    """
    Negotiations where the user is the seller (offers received) or the buyer
    (offers made), newest first. Each carries a ``buyer_name`` attribute.
    """
    if role == 'seller':
        queryset = Negotiation.objects.filter(seller_id=user_id)
    elif role == 'buyer':
        queryset = Negotiation.objects.filter(buyer_id=user_id)
    else:
        raise ValidationFailed("Role must be 'seller' or 'buyer'")

    negotiations = list(queryset.select_related('product').order_by('-created_at', '-id'))
    names = resolve_display_names(n.buyer_id for n in negotiations)
    for negotiation in negotiations:
        negotiation.buyer_name = names.get(negotiation.buyer_id)
    return negotiations
