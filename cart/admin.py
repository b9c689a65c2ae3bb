from django.contrib import admin
from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'product', 'quantity', 'negotiation', 'updated_at']
    search_fields = ['user_id']
