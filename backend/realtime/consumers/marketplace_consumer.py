"""Single websocket endpoint for buyers and sellers."""

import logging
from typing import Any, Dict

from django.utils import timezone

from common.categories import is_valid_category
from realtime.channels import SELLERS_ROOM, category_room, region_room
from .base import BaseConsumer

logger = logging.getLogger(__name__)


class MarketplaceConsumer(BaseConsumer):
    """
    Every user joins their personal room; sellers also join ``sellers`` and
    may subscribe to region and category rooms.

    Client -> server messages:
        ping
        join_seller_region {city, postal_code}
        join_seller_categories {categories: [...]}
    """

    @property
    def is_seller(self) -> bool:
        return self.role == "seller"

    async def on_connect(self):
        if self.is_seller:
            await self.join_room(SELLERS_ROOM)
        logger.info("WS connected: user %s (%s)", self.user_id, self.role)
        await super().on_connect()

    async def on_disconnect(self, close_code):
        logger.info("WS disconnected: user %s (code %s)", getattr(self, "user_id", None), close_code)

    async def handle_message(self, msg_type: str, data: Dict[str, Any]):
        if msg_type == "ping":
            await self.send_success(
                "pong",
                message="Pong!",
                timestamp=timezone.now().isoformat(),
                user_id=self.user_id,
            )
        elif msg_type == "join_seller_region":
            await self.handle_join_region(data)
        elif msg_type == "join_seller_categories":
            await self.handle_join_categories(data)
        else:
            await super().handle_message(msg_type, data)

    async def handle_join_region(self, data: Dict[str, Any]):
        if not self.is_seller:
            await self.send_error("Only sellers can join regions")
            return

        city = (data.get("city") or "").strip()
        postal_code = str(data.get("postal_code") or "").strip()
        if not city or not postal_code:
            await self.send_error("city and postal_code are required")
            return

        room = region_room(city, postal_code)
        await self.join_room(room)
        await self.send_success("region_joined", region=room)

    async def handle_join_categories(self, data: Dict[str, Any]):
        if not self.is_seller:
            await self.send_error("Only sellers can join categories")
            return

        categories = data.get("categories")
        if not isinstance(categories, list):
            await self.send_error("categories must be a list")
            return

        invalid = [c for c in categories if not is_valid_category(c)]
        if invalid:
            await self.send_error(f"Unknown categories: {', '.join(map(str, invalid))}")
            return

        for category in categories:
            await self.join_room(category_room(category))
        await self.send_success("categories_joined", categories=categories)
