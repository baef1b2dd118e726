"""
Notification fan-out.

For every ranked seller, concurrently:
    1. personalize the shared payload
    2. emit it on the session channel (primary, decides success)
    3. push it when the seller has a valid device token (best effort)
    4. bump the seller's total_requests counter

All per-seller sends are started before any is awaited and the coordinator
waits for every one of them before confirming to the request author.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Sequence

from services.matching import MatchCandidate
from .payloads import NewRequestNotification, RequestCreatedConfirmation

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 50


@dataclass
class DispatchResult:
    notified_count: int
    total_candidates: int


class NotificationFanout:

    def __init__(self, session_channel, push_channel, store, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        self.session_channel = session_channel
        self.push_channel = push_channel
        self.store = store
        self.max_concurrency = max(1, int(max_concurrency))

    async def dispatch(self, item_request, ranked: Sequence[MatchCandidate]) -> DispatchResult:
        """
        Notify every candidate, then confirm to the author.

        Never raises for a per-seller failure; those only lower notified_count.
        """
        base = NewRequestNotification.for_request(item_request)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        tasks = [
            asyncio.ensure_future(self._notify_candidate(semaphore, base, candidate))
            for candidate in ranked
        ]
        outcomes: List = await asyncio.gather(*tasks, return_exceptions=True)

        notified = 0
        for candidate, outcome in zip(ranked, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Dispatch to seller %s failed: %s", candidate.seller_id, outcome)
            elif outcome:
                notified += 1

        logger.info(
            "Request %s: notified %d/%d sellers",
            item_request.id, notified, len(ranked)
        )

        await self.send_confirmation(item_request, notified)
        return DispatchResult(notified_count=notified, total_candidates=len(ranked))

    async def _notify_candidate(self, semaphore, base: NewRequestNotification, candidate: MatchCandidate) -> bool:
        async with semaphore:
            payload = base.personalize(candidate)
            delivered = False

            try:
                delivered = await self.session_channel.emit_to_user(
                    candidate.user_id,
                    NewRequestNotification.event_name,
                    payload.as_message(),
                )
            except Exception as e:
                logger.warning("Session emit to seller %s raised: %s", candidate.seller_id, e)

            if delivered:
                logger.debug(
                    "Seller %s notified (score=%s, distance=%skm)",
                    candidate.seller_id, candidate.score, candidate.distance_km
                )
            else:
                logger.info("Session emit to seller %s not delivered", candidate.seller_id)

            await self._push(candidate, payload)

            try:
                await self.store.increment_stats(candidate.seller_id, total_requests=1)
            except Exception as e:
                logger.warning("Stats update for seller %s failed: %s", candidate.seller_id, e)

            return delivered

    async def _push(self, candidate: MatchCandidate, payload: NewRequestNotification) -> None:
        if not candidate.push_token or not self.push_channel.validate_token(candidate.push_token):
            logger.debug("Seller %s has no valid push token, session only", candidate.seller_id)
            return

        message = payload.push_message()
        try:
            result = await self.push_channel.send(
                candidate.push_token, message.title, message.body, message.data
            )
        except Exception as e:
            logger.warning("Push to seller %s raised: %s", candidate.seller_id, e)
            return

        if not result.success:
            logger.info("Push to seller %s failed: %s", candidate.seller_id, result.error)

    async def send_confirmation(self, item_request, notified_count: int) -> bool:
        """Tell the author how many sellers were reached. Zero is a valid outcome."""
        confirmation = RequestCreatedConfirmation.for_request(item_request, notified_count)
        try:
            return await self.session_channel.emit_to_user(
                item_request.user_id,
                RequestCreatedConfirmation.event_name,
                confirmation.as_message(),
            )
        except Exception:
            logger.exception("Confirmation for request %s failed", item_request.id)
            return False
