"""Base WebSocket consumer with shared functionality for all consumers."""

import logging
from typing import Dict, Any, Set

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from realtime.channels import room_group_name, user_room

logger = logging.getLogger(__name__)


class BaseConsumer(AsyncJsonWebsocketConsumer):
    """
    Base consumer with shared connection management and helper methods.

    Subclasses should override:
        - on_connect(): join extra rooms, greet the client
        - handle_message(msg_type, data): handle incoming messages
    """

    async def connect(self):
        self.user = self.scope["user"]

        if self.user.is_anonymous:
            await self.close()
            return

        self.user_id = getattr(self.user, "id", None)
        self.role = getattr(self.user, "role", None)

        # Rooms this connection joined, discarded on disconnect
        self.joined_rooms: Set[str] = set()

        # Personal room for targeted server->user messages
        await self.join_room(user_room(self.user_id))

        await self.accept()
        await self.on_connect()

    async def on_connect(self):
        """Override in subclass for custom connect logic."""
        await self.send_json({
            "type": "connection_established",
            "user_id": self.user_id,
            "role": self.role,
        })

    async def disconnect(self, close_code):
        """Leave all joined rooms on disconnect."""
        try:
            for room in list(getattr(self, "joined_rooms", ())):
                await self.leave_room(room)
            await self.on_disconnect(close_code)
        except Exception:
            logger.exception("Error during disconnect for user %s", getattr(self, 'user_id', 'unknown'))

    async def on_disconnect(self, close_code):
        """Override in subclass for custom disconnect logic."""
        pass

    async def receive_json(self, data: Dict[str, Any]):
        """Route incoming messages to appropriate handlers."""
        msg_type = data.get("type")
        if not msg_type:
            await self.send_error("Message type is required")
            return

        try:
            await self.handle_message(msg_type, data)
        except Exception:
            logger.exception("Error handling message type %s", msg_type)
            await self.send_error(f"Error processing {msg_type}")

    async def handle_message(self, msg_type: str, data: Dict[str, Any]):
        """Override in subclass to handle specific message types."""
        await self.send_error(f"Unknown message type: {msg_type}")

    # ---------------------- Room Management Helpers ----------------------

    async def join_room(self, room: str):
        """Join a room (Channels group) and track it."""
        await self.channel_layer.group_add(room_group_name(room), self.channel_name)
        self.joined_rooms.add(room)

    async def leave_room(self, room: str):
        """Leave a room and untrack it."""
        await self.channel_layer.group_discard(room_group_name(room), self.channel_name)
        self.joined_rooms.discard(room)

    # ---------------------- Response Helpers ----------------------

    async def send_error(self, message: str):
        """Send an error message to the client."""
        await self.send_json({
            "type": "error",
            "message": message,
        })

    async def send_success(self, event_type: str, **kwargs):
        """Send a success response to the client."""
        await self.send_json({
            "type": event_type,
            **kwargs,
        })

    # ---------------------- Server Event Handlers ----------------------
    # These handle group_send events from SessionChannel.emit_to_room

    async def notification_event(self, event):
        """Forward a room emit to the client as {"type": event, "data": payload}."""
        await self.send_json({
            "type": event.get("event"),
            "data": event.get("payload") or {},
        })
