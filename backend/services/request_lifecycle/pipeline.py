"""
Matching pipeline: match -> rank -> fan-out for one saved request.

run() is the recovery boundary. Any matching-level error is logged and
reported to the author as zero sellers notified; nothing propagates.
Requests that are no longer active when the job runs are skipped.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from asgiref.sync import sync_to_async

from item_requests.models import ItemRequest
from services.matching import MatchCandidate, SellerMatcher, rank_candidates
from services.notifications import NotificationFanout

logger = logging.getLogger(__name__)


@dataclass
class PipelineOutcome:
    """Result object for one matching pass."""
    request_id: int
    notified_count: int = 0
    total_candidates: int = 0
    error: Optional[str] = None
    # Set when the request was no longer active, e.g. "cancelled" or "expired"
    skipped: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@sync_to_async
def _load_request(request_id: int) -> ItemRequest:
    return ItemRequest.objects.select_related("user").get(id=request_id)


class MatchingPipeline:

    def __init__(
        self,
        matcher: SellerMatcher,
        fanout: NotificationFanout,
        ranker: Callable[..., List[MatchCandidate]] = rank_candidates,
    ):
        self.matcher = matcher
        self.fanout = fanout
        self.ranker = ranker

    async def preview(self, item_request: ItemRequest) -> List[MatchCandidate]:
        """Ranked candidates without notifying anyone."""
        candidates = await self.matcher.find_matching_sellers(item_request)
        return self.ranker(candidates, item_request)

    async def run(self, request_id: int) -> PipelineOutcome:
        try:
            item_request = await _load_request(request_id)
        except ItemRequest.DoesNotExist:
            logger.warning("Matching skipped: request %s not found", request_id)
            return PipelineOutcome(request_id=request_id, error="Request not found")
        except Exception as e:
            # No author to confirm to when the request itself cannot be read
            logger.exception("Loading request %s for matching failed", request_id)
            return PipelineOutcome(request_id=request_id, error=str(e))

        if not item_request.is_active():
            reason = item_request.status if item_request.status != "active" else "expired"
            logger.info("Matching skipped: request %s is %s", request_id, reason)
            return PipelineOutcome(request_id=request_id, skipped=reason)

        try:
            ranked = await self.preview(item_request)
            result = await self.fanout.dispatch(item_request, ranked)
        except Exception as e:
            logger.exception("Matching failed for request %s", request_id)
            await self.fanout.send_confirmation(item_request, 0)
            return PipelineOutcome(request_id=request_id, error=str(e))

        return PipelineOutcome(
            request_id=request_id,
            notified_count=result.notified_count,
            total_candidates=result.total_candidates,
        )
