from django.db import models


class Negotiation(models.Model):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (ACCEPTED, 'Accepted'),
        (REJECTED, 'Rejected'),
    ]

    product = models.ForeignKey('products.Product', on_delete=models.CASCADE, related_name='negotiations')
    buyer_id = models.CharField(max_length=100, db_index=True)
    seller_id = models.CharField(max_length=100, db_index=True)
    original_price = models.DecimalField(max_digits=10, decimal_places=2)
    proposed_price = models.DecimalField(max_digits=10, decimal_places=2)
    message = models.TextField(blank=True, default='')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'negotiations'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['seller_id', 'status'], name='negotiations_seller_idx'),
        ]

    def __str__(self):
        return f"Negotiation {self.pk}: {self.proposed_price} for {self.product_id} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.PENDING
