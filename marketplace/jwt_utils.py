"""
JWT utilities for the marketplace application.

Tokens are issued by the authentication provider; this module validates them
and can mint equivalent tokens for tests and local development.
"""

import jwt
import time
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class JWTManager:
    """
    JWT Manager for token generation and validation.
    """

    def __init__(self):
        # Don't access settings immediately
        self._secret = None
        self._algorithm = None

    def _get_secret(self):
        """Get the signing secret, with lazy loading."""
        if self._secret is None:
            self._secret = getattr(settings, 'JWT_SECRET', 'test_jwt_secret_key')
        return self._secret

    def _get_algorithm(self):
        """Get the JWT algorithm, with lazy loading."""
        if self._algorithm is None:
            self._algorithm = getattr(settings, 'JWT_ALGORITHM', 'HS256')
        return self._algorithm

    def generate_token(self, user_id, email=None, expires_in_hours=24):
        """
        Generate a JWT token for testing purposes.

        Args:
            user_id (str): The user ID to include in the token
            email (str): Optional email claim
            expires_in_hours (int): Token expiration time in hours

        Returns:
            str: JWT token string
        """
        payload = {
            'sub': user_id,
            'iat': int(time.time()),
            'exp': int(time.time()) + (expires_in_hours * 3600)
        }
        if email:
            payload['email'] = email
        audience = getattr(settings, 'JWT_AUDIENCE', None)
        issuer = getattr(settings, 'JWT_ISSUER', None)
        if audience:
            payload['aud'] = audience
        if issuer:
            payload['iss'] = issuer

        return jwt.encode(payload, self._get_secret(), algorithm=self._get_algorithm())

    def validate_token(self, token):
        """
        Validate a JWT token and extract the payload.

        Raises:
            jwt.InvalidTokenError: If token is invalid or expired
        """
        options = {}
        kwargs = {}
        audience = getattr(settings, 'JWT_AUDIENCE', None)
        issuer = getattr(settings, 'JWT_ISSUER', None)
        if audience:
            kwargs['audience'] = audience
        else:
            options['verify_aud'] = False
        if issuer:
            kwargs['issuer'] = issuer

        try:
            return jwt.decode(
                token,
                self._get_secret(),
                algorithms=[self._get_algorithm()],
                options=options,
                **kwargs
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired token")
            raise jwt.InvalidTokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected invalid token", extra={"error": str(e)})
            raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")


# Global JWT manager instance - create lazily
_jwt_manager = None

def _get_jwt_manager():
    """Get the global JWT manager instance, creating it if needed."""
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager


def generate_test_token(user_id, email=None, expires_in_hours=24):
    """Generate a test JWT token for the given user ID."""
    return _get_jwt_manager().generate_token(user_id, email, expires_in_hours)


def validate_jwt_token(token):
    """Validate a JWT token and return the payload."""
    return _get_jwt_manager().validate_token(token)
