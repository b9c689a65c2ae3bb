from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import feed_to_dict


class NotificationListView(APIView):
    def get(self, request):
        feed = services.compute_notifications(request.user_id)
        return Response(feed_to_dict(feed))


class MarkNotificationReadView(APIView):
    def post(self, request, notification_id):
        changed = services.mark_notification_read(request.user_id, notification_id)
        return Response({'success': True, 'changed': changed})


class MarkAllNotificationsReadView(APIView):
    def post(self, request):
        updated = services.mark_all_notifications_read(request.user_id)
        return Response({'success': True, 'messages_marked_read': updated})
