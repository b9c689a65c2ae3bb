import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.exceptions import ObjectDoesNotExist
from rest_framework.exceptions import APIException

from websocket_chat.events import notification_group
from . import services
from .serializers import feed_to_dict

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    Pushes the caller's full notification feed on connect and whenever a
    relevant message or negotiation changes
    """

    async def connect(self):
        self.user_id = self.scope.get('user_id')
        if not self.user_id:
            await self.close(code=4001)
            return

        self.group_name = notification_group(self.user_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send_feed()

    async def disconnect(self, code):
        if getattr(self, 'group_name', None):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
            if not isinstance(data, dict):
                await self.send_error("Invalid message format")
                return

            action = data.get('type')
            if action == 'mark_read':
                await database_sync_to_async(services.mark_notification_read)(
                    self.user_id, data.get('notification_id')
                )
            elif action == 'mark_all_read':
                await database_sync_to_async(services.mark_all_notifications_read)(self.user_id)
            elif action != 'refresh':
                await self.send_error("Unknown message type")
                return

            await self.send_feed()

        except json.JSONDecodeError:
            await self.send_error("Invalid JSON format")
        except APIException as e:
            await self.send_error(str(e.detail))
        except ObjectDoesNotExist:
            await self.send_error("Not found")
        except Exception:
            logger.exception("Unhandled error in notification consumer for %s", self.user_id)
            await self.send_error("Internal server error")

    async def notifications_changed(self, event):
        await self.send_feed()

    async def send_feed(self):
        feed = await self.load_feed()
        await self.send(text_data=json.dumps({'type': 'notifications', **feed}))

    @database_sync_to_async
    def load_feed(self):
        return feed_to_dict(services.compute_notifications(self.user_id))

    async def send_error(self, message):
        await self.send(text_data=json.dumps({
            'type': 'error',
            'message': message
        }))
