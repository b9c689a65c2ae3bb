import logging
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from marketplace.exceptions import InvalidPriceError, NotParticipantError, ValidationFailed
from .models import Product, Review

logger = logging.getLogger(__name__)

# Largest value the price columns (10 digits, 2 decimals) can hold
MAX_PRICE = Decimal('99999999.99')
PRODUCT_FIELDS = ('name', 'description', 'price', 'image_url', 'category', 'stock_quantity')


def parse_price(value) -> Decimal:
    """Whole cents, above zero and within the price column."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPriceError()
    if not price.is_finite() or price > MAX_PRICE:
        raise InvalidPriceError()
    price = price.quantize(Decimal('0.01'))
    if price <= 0:
        raise InvalidPriceError()
    return price


def _clean_product_fields(data, partial=False):
    fields = {key: data[key] for key in PRODUCT_FIELDS if key in data}

    for key in ('name', 'price', 'category'):
        if key in fields and isinstance(fields[key], str):
            fields[key] = fields[key].strip()
        if (not partial or key in fields) and fields.get(key) in (None, ''):
            raise ValidationFailed('Please fill in all required fields')

    if 'price' in fields:
        fields['price'] = parse_price(fields['price'])

    if 'stock_quantity' in fields:
        try:
            stock = int(fields['stock_quantity'] if fields['stock_quantity'] is not None else 0)
        except (TypeError, ValueError):
            raise ValidationFailed('Please enter a valid stock quantity')
        if stock < 0:
            raise ValidationFailed('Stock quantity cannot be negative')
        fields['stock_quantity'] = stock

    if 'image_url' in fields:
        fields['image_url'] = fields['image_url'] or None
    if 'description' in fields:
        fields['description'] = (fields['description'] or '').strip()
    return fields


def create_product(seller_id, data):
    fields = _clean_product_fields(data)
    product = Product.objects.create(seller_id=seller_id, **fields)
    logger.info("Seller %s listed product %s", seller_id, product.pk)
    return product


def _owned_product(product_id, seller_id):
    product = Product.objects.get(pk=product_id)
    if product.seller_id != seller_id:
        raise NotParticipantError('Only the seller can change this product')
    return product


def update_product(product_id, seller_id, data):
    product = _owned_product(product_id, seller_id)
    fields = _clean_product_fields(data, partial=True)
    for key, value in fields.items():
        setattr(product, key, value)
    product.save()
    logger.info("Seller %s updated product %s", seller_id, product.pk)
    return product


def delete_product(product_id, seller_id):
    product = _owned_product(product_id, seller_id)
    product.delete()
    logger.info("Seller %s deleted product %s", seller_id, product_id)


def submit_review(product_id, user_id, rating, comment=''):
    """
    Create or update the caller's single review of a product.

    Returns ``(review, created)``. A concurrent first submission that loses the
    unique (product, user) race updates the winner's row instead of failing.
    """
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise ValidationFailed('Please select a rating')
    if rating < 1 or rating > 5:
        raise ValidationFailed('Rating must be between 1 and 5')

    product = Product.objects.get(pk=product_id)
    comment = (comment or '').strip()

    review = Review.objects.filter(product=product, user_id=user_id).first()
    if review is None:
        try:
            with transaction.atomic():
                review = Review.objects.create(product=product, user_id=user_id, rating=rating, comment=comment)
            logger.info("User %s reviewed product %s", user_id, product.pk)
            return review, True
        except IntegrityError:
            logger.debug("Review by %s for %s already exists, updating", user_id, product.pk)
            review = Review.objects.get(product=product, user_id=user_id)

    review.rating = rating
    review.comment = comment
    review.save(update_fields=['rating', 'comment', 'updated_at'])
    return review, False


def review_summary(product_id):
    summary = Review.objects.filter(product_id=product_id).aggregate(
        average_rating=Avg('rating'), review_count=Count('id')
    )
    if summary['average_rating'] is not None:
        summary['average_rating'] = round(float(summary['average_rating']), 1)
    return summary
