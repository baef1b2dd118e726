"""WebSocket authentication middleware for JWT access tokens."""

import logging
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()
logger = logging.getLogger(__name__)


def _token_from_scope(scope):
    """
    Pull the raw token from either:
    1. the querystring (?token=...), used by the mobile app
    2. an ``Authorization: Bearer ...`` header
    """
    params = parse_qs(scope.get("query_string", b"").decode())
    token_list = params.get("token")
    if token_list:
        return token_list[0]

    for name, value in scope.get("headers", []):
        if name.lower() == b"authorization":
            parts = value.decode().split()
            if len(parts) == 2 and parts[0].lower() == "bearer":
                return parts[1]
    return None


@sync_to_async
def _get_active_user(user_id):
    try:
        return User.objects.get(id=user_id, is_active=True)
    except User.DoesNotExist:
        return None


class JWTAuthMiddleware(BaseMiddleware):
    """Bind the websocket session to the user named by a valid access token."""

    async def __call__(self, scope, receive, send):
        scope["user"] = AnonymousUser()

        token = _token_from_scope(scope)
        if token:
            try:
                access = AccessToken(token)
                user = await _get_active_user(access["user_id"])
                if user is not None:
                    scope["user"] = user
                else:
                    logger.debug("JWT auth: user %s missing or inactive", access["user_id"])
            except (TokenError, KeyError) as e:
                logger.debug("JWT auth failed: %s", e)

        return await super().__call__(scope, receive, send)
