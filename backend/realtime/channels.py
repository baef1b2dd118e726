"""
Session channel: room-addressed publish over the Channels layer.

Rooms keep their public names (``user:42``, ``sellers``,
``region:Paris:75001``, ``category:electronique``); Channels group names
only allow ASCII alphanumerics, hyphens, underscores and periods, so each
room is mapped onto a group name with room_group_name().
"""

import logging
import re
from typing import Any, Dict

from channels.layers import get_channel_layer
from django.utils.text import slugify

logger = logging.getLogger(__name__)

SELLERS_ROOM = "sellers"

# Event type consumers receive for every emit (handled by notification_event)
NOTIFICATION_EVENT_TYPE = "notification.event"

_INVALID_GROUP_CHARS = re.compile(r"[^a-zA-Z0-9_.\-]")
_MAX_GROUP_NAME_LENGTH = 99


def user_room(user_id) -> str:
    return f"user:{user_id}"


def region_room(city: str, postal_code: str) -> str:
    return f"region:{city}:{postal_code}"


def category_room(category: str) -> str:
    return f"category:{category}"


def room_group_name(room: str) -> str:
    """
    Map a room id onto a valid Channels group name.

    ``:`` separators become ``.``; every segment is slugified so accented
    city names and spaces are accepted.
    """
    segments = []
    for segment in room.split(":"):
        cleaned = slugify(segment) or "_"
        segments.append(_INVALID_GROUP_CHARS.sub("_", cleaned))
    return ".".join(segments)[:_MAX_GROUP_NAME_LENGTH]


class SessionChannel:
    """
    Live, connection-bound delivery.

    A send succeeds once the layer accepted the message for the room's
    group; whether anyone is currently connected is not observable here.
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    async def emit_to_room(self, room: str, event_name: str, payload: Dict[str, Any]) -> bool:
        layer = self.channel_layer
        if layer is None:
            logger.warning("No channel layer configured, dropping %s for %s", event_name, room)
            return False

        message = {
            "type": NOTIFICATION_EVENT_TYPE,
            "event": event_name,
            "payload": payload,
        }
        try:
            await layer.group_send(room_group_name(room), message)
        except Exception as e:
            logger.warning("Session emit %s to %s failed: %s", event_name, room, e)
            return False

        logger.debug("Session emit %s to %s", event_name, room)
        return True

    async def emit_to_user(self, user_id, event_name: str, payload: Dict[str, Any]) -> bool:
        return await self.emit_to_room(user_room(user_id), event_name, payload)

