import logging
import time
from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware
from django.conf import settings
from django.core.cache import cache

from marketplace.jwt_utils import validate_jwt_token

logger = logging.getLogger(__name__)


class WebSocketAuthMiddleware(BaseMiddleware):
    """
    Middleware for WebSocket authentication
    Validates the ``?token=`` JWT and applies a per-user connection rate limit
    """

    async def __call__(self, scope, receive, send):
        query_params = parse_qs(scope.get('query_string', b'').decode())
        token = query_params.get('token', [None])[0]

        if not token:
            await send({
                'type': 'websocket.close',
                'code': 4001,
                'reason': 'Authentication token required'
            })
            return

        claims = self.validate_token(token)
        if not claims or not claims.get('sub'):
            await send({
                'type': 'websocket.close',
                'code': 4001,
                'reason': 'Invalid authentication token'
            })
            return

        user_id = str(claims['sub'])
        if not self.check_rate_limit(user_id):
            logger.warning("WebSocket rate limit exceeded for %s", user_id)
            await send({
                'type': 'websocket.close',
                'code': 4029,
                'reason': 'Rate limit exceeded'
            })
            return

        scope['user_id'] = user_id
        scope['user_email'] = claims.get('email')
        scope['authenticated'] = True

        return await super().__call__(scope, receive, send)

    def validate_token(self, token):
        """Return the token claims, or None when the token is rejected"""
        try:
            return validate_jwt_token(token)
        except Exception as e:
            logger.info("WebSocket JWT validation failed: %s", e)
            return None

    def check_rate_limit(self, user_id):
        """Check if user has exceeded the connection rate limit"""
        cache_key = f"websocket_rate_limit:{user_id}"
        current_time = int(time.time())

        rate_data = cache.get(cache_key, {'count': 0, 'window_start': current_time})

        # 1 minute window
        if current_time - rate_data['window_start'] >= 60:
            rate_data = {'count': 0, 'window_start': current_time}

        if rate_data['count'] >= settings.WEBSOCKET_RATE_LIMIT:
            return False

        rate_data['count'] += 1
        cache.set(cache_key, rate_data, 60)
        return True


class WebSocketSecurityMiddleware(BaseMiddleware):
    """Expose connection limits to consumers through the scope"""

    async def __call__(self, scope, receive, send):
        scope['max_message_size'] = settings.WEBSOCKET_MAX_MESSAGE_SIZE
        scope['connection_timeout'] = settings.WEBSOCKET_CONNECTION_TIMEOUT
        scope['heartbeat_interval'] = settings.WEBSOCKET_HEARTBEAT_INTERVAL

        return await super().__call__(scope, receive, send)
