from django.contrib import admin

from .models import Negotiation


@admin.register(Negotiation)
class NegotiationAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'buyer_id', 'seller_id', 'original_price', 'proposed_price', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['buyer_id', 'seller_id', 'product__name']
