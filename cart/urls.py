from django.urls import path
from . import views

app_name = 'cart'

urlpatterns = [
    path('', views.CartView.as_view(), name='cart'),
    path('items/<int:item_id>/', views.CartItemView.as_view(), name='cart-item'),
]
