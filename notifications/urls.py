from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('', views.NotificationListView.as_view(), name='notification-list'),
    path('read-all/', views.MarkAllNotificationsReadView.as_view(), name='notification-read-all'),
    path('<str:notification_id>/read/', views.MarkNotificationReadView.as_view(), name='notification-read'),
]
