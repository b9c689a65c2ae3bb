from rest_framework import status
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed
import jwt

from .jwt_utils import validate_jwt_token


class AuthenticatedUser:
    """Identity handed out by the authentication provider (id and email only)."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, user_id, email=None):
        self.user_id = user_id
        self.email = email

    def __str__(self):
        return self.user_id


class JWTAuthentication(BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        """
        Authenticate a request using the bearer JWT in the Authorization header.

        On success the token claims are attached to ``request.jwt_claims``, the
        subject to ``request.user_id`` and the email claim to
        ``request.user_email``.

        Returns:
            tuple: ``(AuthenticatedUser, claims)``, or ``None`` when no bearer
            header is present so that permission classes answer with 401.

        Raises:
            AuthenticationFailed: If the header is malformed or the token is invalid.
        """
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise AuthenticationFailed(
                "Wrong token format. Expected 'Bearer token'", status.HTTP_401_UNAUTHORIZED
            )

        try:
            payload = validate_jwt_token(auth[1].decode())
        except (jwt.InvalidTokenError, UnicodeError) as e:
            raise AuthenticationFailed(str(e))

        user_id = payload.get('sub')
        if not user_id:
            raise AuthenticationFailed('Token has no subject')

        request.jwt_claims = payload
        request.user_id = str(user_id)
        request.user_email = payload.get('email')
        return (AuthenticatedUser(request.user_id, request.user_email), payload)

    def authenticate_header(self, request):
        return self.keyword
