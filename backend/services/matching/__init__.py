"""
Seller matching service.

This module handles:
    - Proximity + specialty lookup of sellers for a request
    - Multi-factor ranking of the matched sellers
"""

from .store import MatchCandidate, SellerFilters, SellerStore
from .seller_search import SellerMatcher
from .ranking import score, rank_candidates

__all__ = [
    "MatchCandidate",
    "SellerFilters",
    "SellerStore",
    "SellerMatcher",
    "score",
    "rank_candidates",
]
