"""
Match ranking.

Each candidate gets a non-negative integer score summed from five parts:

    distance        max(0, 50 - 2 * km)          0..50
    exact specialty +30 for category + sub-category match
    reputation      rating * 10                  0..50
    recency         max(0, 20 - days inactive)   0..20
    responsiveness  responded / max(1, total) * 20

Scores are not normalised to a fixed range. Ranking orders candidates, it
never filters them.
"""

import math
from datetime import datetime
from typing import List, Optional, Sequence

from django.utils import timezone

from item_requests.models import ItemRequest
from .store import MatchCandidate

DISTANCE_MAX_POINTS = 50
DISTANCE_POINTS_PER_KM = 2
EXACT_SPECIALTY_BONUS = 30
RATING_MULTIPLIER = 10
RECENCY_MAX_POINTS = 20
RESPONSIVENESS_MAX_POINTS = 20

SECONDS_PER_DAY = 86400


def _finite(value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def distance_points(distance_km: float) -> float:
    return max(0.0, DISTANCE_MAX_POINTS - DISTANCE_POINTS_PER_KM * _finite(distance_km))


def recency_points(last_active_at: Optional[datetime], now: datetime) -> float:
    if last_active_at is None:
        return 0.0
    days = (now - last_active_at).total_seconds() / SECONDS_PER_DAY
    return max(0.0, RECENCY_MAX_POINTS - max(0.0, days))


def responsiveness_points(responded: int, total: int) -> float:
    return _finite(_finite(responded) / max(1.0, _finite(total))) * RESPONSIVENESS_MAX_POINTS


def score(
    candidate: MatchCandidate,
    item_request: ItemRequest,
    distance_km: Optional[float] = None,
    now: Optional[datetime] = None,
) -> int:
    """Integer match score, rounded half up."""
    if distance_km is None:
        distance_km = candidate.raw_distance_km
    now = now or timezone.now()

    total = distance_points(distance_km)
    if candidate.has_exact_specialty(item_request.category, item_request.sub_category):
        total += EXACT_SPECIALTY_BONUS
    total += _finite(candidate.rating) * RATING_MULTIPLIER
    total += recency_points(candidate.last_active_at, now)
    total += responsiveness_points(candidate.responded_requests, candidate.total_requests)

    return int(math.floor(total + 0.5))


def rank_candidates(
    candidates: Sequence[MatchCandidate],
    item_request: ItemRequest,
    now: Optional[datetime] = None,
) -> List[MatchCandidate]:
    """
    Score every candidate and sort by score, highest first.

    The sort is stable, so equal scores keep the nearest-first order.
    """
    now = now or timezone.now()
    for candidate in candidates:
        candidate.score = score(candidate, item_request, now=now)
    return sorted(candidates, key=lambda c: c.score, reverse=True)
