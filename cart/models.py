from django.core.validators import MinValueValidator
from django.db import models


class CartItem(models.Model):
    """One row per (user, product); adding the product again raises the quantity."""
    user_id = models.CharField(max_length=100, db_index=True)
    product = models.ForeignKey('products.Product', on_delete=models.CASCADE, related_name='cart_items')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    # Accepted offer whose price applies to this row
    negotiation = models.ForeignKey(
        'negotiations.Negotiation', on_delete=models.SET_NULL, null=True, blank=True, related_name='cart_items'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cart_items'
        ordering = ['created_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'product'], name='one_cart_row_per_user_per_product'),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_id} for {self.user_id}"

    @property
    def unit_price(self):
        negotiation = self.negotiation
        if negotiation is not None and negotiation.status == negotiation.ACCEPTED:
            return negotiation.proposed_price
        return self.product.price

    @property
    def line_total(self):
        return self.unit_price * self.quantity
