"""
URL configuration for the marketplace project.
"""
from django.contrib import admin
from django.urls import path, include
from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('ping/', views.PingView.as_view(), name='ping'),
    path('profiles/', include('profiles.urls')),
    path('products/', include('products.urls')),
    path('conversations/', include('conversations.urls')),
    path('negotiations/', include('negotiations.urls')),
    path('notifications/', include('notifications.urls')),
    path('cart/', include('cart.urls')),
    path('orders/', include('orders.urls')),
    path('chatbot/', include('chatbot.urls')),
    path('chat/', include('websocket_chat.urls')),
]
