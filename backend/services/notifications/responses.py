"""
Response notifications: new responses go to the request author, status
changes go to the seller.

The session channel decides success, push is best effort. Several
recipients notified at once share one batched push submission.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .payloads import SessionNotification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    """One notification for one user."""
    user_id: int
    notification: SessionNotification
    push_token: Optional[str] = None


class ResponseNotifier:

    def __init__(self, session_channel, push_channel):
        self.session_channel = session_channel
        self.push_channel = push_channel

    async def deliver(self, delivery: Delivery) -> bool:
        delivered = await self._emit(delivery)

        if self.push_channel.validate_token(delivery.push_token):
            push = delivery.notification.push_message()
            result = await self.push_channel.send(delivery.push_token, push.title, push.body, push.data)
            if not result.success:
                logger.info("Push %s to user %s failed: %s", push.title, delivery.user_id, result.error)

        return delivered

    async def deliver_many(self, deliveries: Iterable[Delivery]) -> int:
        """Emit to every recipient concurrently, then push in one batch."""
        deliveries = list(deliveries)
        if not deliveries:
            return 0

        results = await asyncio.gather(*(self._emit(delivery) for delivery in deliveries))

        pushes = [
            (delivery.push_token, delivery.notification.push_message())
            for delivery in deliveries
            if delivery.push_token
        ]
        if pushes:
            try:
                summary = await self.push_channel.send_batch(pushes)
            except Exception:
                logger.exception("Push batch of %s response notifications failed", len(pushes))
            else:
                if summary.error_count:
                    logger.info("Push batch: %s rejected", summary.error_count)

        return sum(1 for delivered in results if delivered)

    async def _emit(self, delivery: Delivery) -> bool:
        notification = delivery.notification
        try:
            return await self.session_channel.emit_to_user(
                delivery.user_id,
                notification.event_name,
                notification.as_message(),
            )
        except Exception as e:
            logger.warning("Session emit %s to user %s raised: %s", notification.event_name, delivery.user_id, e)
            return False
