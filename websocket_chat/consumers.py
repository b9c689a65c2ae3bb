import asyncio
import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ObjectDoesNotExist
from rest_framework.exceptions import APIException

from conversations import services
from .events import conversation_group

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for real-time chat functionality
    Implements room-based messaging; new messages reach the room through the
    change feed once they are committed, whichever path inserted them
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = None
        self.user_email = None
        self.current_conversation = None
        self.room_group_name = None
        self.heartbeat_task = None

    async def connect(self):
        """Handle WebSocket connection with authentication"""
        self.user_id = self.scope.get('user_id')
        self.user_email = self.scope.get('user_email')
        if not self.user_id:
            await self.close(code=4001)
            return

        await self.accept()

        self.heartbeat_task = asyncio.create_task(self.heartbeat_loop())

        await self.store_connection()

    async def disconnect(self, code):
        """Handle WebSocket disconnection and cleanup"""
        if self.heartbeat_task:
            self.heartbeat_task.cancel()

        await self.leave_conversation_room()

        if self.user_id:
            await self.remove_connection()

    async def receive(self, text_data=None, bytes_data=None):
        """Handle incoming WebSocket messages"""
        if text_data is None:
            await self.send_error("Binary frames are not supported")
            return

        try:
            if len(text_data) > settings.WEBSOCKET_MAX_MESSAGE_SIZE:
                await self.send_error("Message too large")
                return

            data = json.loads(text_data)
            if not isinstance(data, dict):
                await self.send_error("Invalid message format")
                return

            message_type = data.get('type')

            if message_type == 'join_conversation':
                await self.handle_join_conversation(data)
            elif message_type == 'leave_conversation':
                await self.handle_leave_conversation(data)
            elif message_type == 'chat_message':
                await self.handle_chat_message(data)
            elif message_type == 'product_mention':
                await self.handle_product_mention(data)
            elif message_type == 'mark_read':
                await self.handle_mark_read(data)
            elif message_type == 'typing_start':
                await self.handle_typing(data, 'typing_start')
            elif message_type == 'typing_stop':
                await self.handle_typing(data, 'typing_stop')
            elif message_type == 'heartbeat':
                await self.handle_heartbeat()
            else:
                await self.send_error("Unknown message type")

        except json.JSONDecodeError:
            await self.send_error("Invalid JSON format")
        except APIException as e:
            await self.send_error(str(e.detail))
        except ObjectDoesNotExist:
            await self.send_error("Not found")
        except Exception:
            logger.exception("Unhandled error in chat consumer for %s", self.user_id)
            await self.send_error("Internal server error")

    async def handle_join_conversation(self, data):
        """Join a conversation room and mark its incoming messages read"""
        conversation_id = data.get('conversation_id')

        if not conversation_id:
            await self.send_error("Conversation ID required")
            return

        if not await self.verify_conversation_access(conversation_id):
            await self.send_error("Access denied to conversation")
            return

        await self.leave_conversation_room()

        self.current_conversation = int(conversation_id)
        self.room_group_name = conversation_group(self.current_conversation)

        await self.channel_layer.group_add(
            self.room_group_name,
            self.channel_name
        )

        marked = await database_sync_to_async(services.mark_conversation_read)(
            self.current_conversation, self.user_id
        )

        await self.send(text_data=json.dumps({
            'type': 'conversation_joined',
            'conversation_id': self.current_conversation,
            'messages_marked_read': marked
        }))

    async def handle_leave_conversation(self, data):
        """Leave the current conversation room; a no-op when not in one"""
        conversation_id = self.current_conversation
        await self.leave_conversation_room()

        await self.send(text_data=json.dumps({
            'type': 'conversation_left',
            'conversation_id': conversation_id
        }))

    async def handle_chat_message(self, data):
        if not self.room_group_name:
            await self.send_error("Not in a conversation")
            return

        content = data.get('content')
        if not isinstance(content, str) or not content.strip():
            await self.send_error("Message content required")
            return

        message = await database_sync_to_async(services.send_message)(
            self.current_conversation,
            self.user_id,
            content,
            sender_email=self.user_email,
        )
        await self.send_ack(message)

    async def handle_product_mention(self, data):
        if not self.room_group_name:
            await self.send_error("Not in a conversation")
            return

        product_id = data.get('product_id')
        if not product_id:
            await self.send_error("Product ID required")
            return

        message = await database_sync_to_async(services.mention_product)(
            self.current_conversation,
            self.user_id,
            product_id,
            sender_email=self.user_email,
        )
        await self.send_ack(message)

    async def handle_mark_read(self, data):
        """Mark one message, or the whole current conversation, as read"""
        message_id = data.get('message_id')
        if message_id is not None and not isinstance(message_id, int):
            try:
                message_id = int(message_id)
            except (TypeError, ValueError):
                await self.send_error("Message ID must be an integer")
                return

        if message_id:
            changed = await database_sync_to_async(services.mark_message_read)(message_id, self.user_id)
            marked = 1 if changed else 0
        elif self.current_conversation:
            marked = await database_sync_to_async(services.mark_conversation_read)(
                self.current_conversation, self.user_id
            )
        else:
            await self.send_error("Not in a conversation")
            return

        await self.send(text_data=json.dumps({
            'type': 'messages_read',
            'conversation_id': self.current_conversation,
            'messages_marked_read': marked
        }))

    async def handle_typing(self, data, event_type):
        """Relay typing indicators to the rest of the room"""
        if not self.room_group_name:
            return

        await self.channel_layer.group_send(
            self.room_group_name,
            {
                'type': event_type,
                'user_id': self.user_id,
                'conversation_id': self.current_conversation
            }
        )

    async def handle_heartbeat(self):
        await self.send(text_data=json.dumps({
            'type': 'heartbeat_response',
            'timestamp': asyncio.get_event_loop().time()
        }))

    async def send_ack(self, message):
        await self.send(text_data=json.dumps({
            'type': 'message_sent',
            'message_id': message.pk,
            'conversation_id': message.conversation_id
        }))

    async def chat_message(self, event):
        """Send chat message to WebSocket"""
        await self.send(text_data=json.dumps({
            'type': 'chat_message',
            'message': event['message']
        }))

    async def typing_start(self, event):
        if event['user_id'] != self.user_id:
            await self.send(text_data=json.dumps(event))

    async def typing_stop(self, event):
        if event['user_id'] != self.user_id:
            await self.send(text_data=json.dumps(event))

    async def leave_conversation_room(self):
        if self.room_group_name:
            await self.channel_layer.group_discard(
                self.room_group_name,
                self.channel_name
            )
            self.room_group_name = None
            self.current_conversation = None

    async def heartbeat_loop(self):
        """Send periodic heartbeat to keep connection alive"""
        while True:
            try:
                await asyncio.sleep(settings.WEBSOCKET_HEARTBEAT_INTERVAL)
                await self.send(text_data=json.dumps({
                    'type': 'heartbeat',
                    'timestamp': asyncio.get_event_loop().time()
                }))
            except asyncio.CancelledError:
                break
            except Exception:
                break

    async def send_error(self, message):
        await self.send(text_data=json.dumps({
            'type': 'error',
            'message': message
        }))

    @database_sync_to_async
    def verify_conversation_access(self, conversation_id):
        """Verify user has access to conversation"""
        try:
            services.get_conversation_for_participant(int(conversation_id), self.user_id)
            return True
        except (ValueError, TypeError, ObjectDoesNotExist, APIException):
            return False

    async def store_connection(self):
        cache_key = f"websocket_connection:{self.user_id}"
        cache.set(cache_key, {
            'channel_name': self.channel_name,
            'connected_at': asyncio.get_event_loop().time()
        }, settings.WEBSOCKET_CONNECTION_TIMEOUT)

    async def remove_connection(self):
        cache_key = f"websocket_connection:{self.user_id}"
        cache.delete(cache_key)
