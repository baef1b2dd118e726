"""
Seller matching engine.

A seller matches a request when all of these hold:
    - status is one of the eligible statuses (active and pending by default)
    - is_available is true
    - the seller lies within the request radius
    - one specialty has the request category AND lists its sub-category
"""

import logging
from typing import Iterable, List

from item_requests.models import ItemRequest
from .store import MatchCandidate, SellerFilters, SellerStore

logger = logging.getLogger(__name__)

DEFAULT_ELIGIBLE_STATUSES = ("active", "pending")


class SellerMatcher:

    def __init__(self, store: SellerStore, eligible_statuses: Iterable[str] = DEFAULT_ELIGIBLE_STATUSES):
        self.store = store
        self.eligible_statuses = frozenset(eligible_statuses)

    def filters_for(self, item_request: ItemRequest) -> SellerFilters:
        return SellerFilters(
            statuses=self.eligible_statuses,
            is_available=True,
            category=item_request.category,
            sub_category=item_request.sub_category,
        )

    async def find_matching_sellers(self, item_request: ItemRequest) -> List[MatchCandidate]:
        """
        Candidates for one request, nearest-first.

        Store errors propagate to the caller.
        """
        candidates = await self.store.find_within(
            point=item_request.point,
            radius_meters=item_request.radius * 1000,
            filters=self.filters_for(item_request),
        )
        logger.info(
            "Request %s (%s/%s, r=%skm): %d matching sellers",
            item_request.id, item_request.category, item_request.sub_category,
            item_request.radius, len(candidates)
        )
        return candidates
