"""
Seller store: proximity queries and atomic stats updates.

find_within() narrows sellers in SQL (status, availability, category and a
lat/lon bounding box), then applies the exact haversine radius and the
sub-category membership test in Python. Results come back nearest-first.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Tuple

from asgiref.sync import sync_to_async

from accounts.services import push_token_for
from common.utils import bounding_box, distance_km
from sellers.models import Seller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SellerFilters:
    """Compound filter applied together with proximity."""
    statuses: FrozenSet[str] = frozenset({"active", "pending"})
    is_available: Optional[bool] = True
    category: Optional[str] = None
    sub_category: Optional[str] = None


@dataclass
class MatchCandidate:
    """
    A seller provisionally matched to one request.

    Lives for a single matching pass; never persisted.
    """
    seller_id: int
    user_id: int
    business_name: str
    email: str
    first_name: str
    raw_distance_km: float
    rating: float
    total_requests: int
    responded_requests: int
    last_active_at: Optional[datetime]
    specialties: List[Tuple[str, List[str]]] = field(default_factory=list)
    push_token: Optional[str] = None
    score: int = 0

    @property
    def distance_km(self) -> float:
        """Distance rounded to one decimal, as shown to the seller."""
        return round(self.raw_distance_km, 1)

    def has_exact_specialty(self, category: str, sub_category: str) -> bool:
        return any(
            cat == category and sub_category in subs
            for cat, subs in self.specialties
        )


def _to_candidate(seller: Seller, distance: float) -> MatchCandidate:
    return MatchCandidate(
        seller_id=seller.id,
        user_id=seller.user_id,
        business_name=seller.business_name,
        email=seller.user.email,
        first_name=seller.user.first_name,
        raw_distance_km=distance,
        rating=seller.rating or 0,
        total_requests=seller.total_requests,
        responded_requests=seller.responded_requests,
        last_active_at=seller.last_active_at,
        specialties=[(s.category, list(s.sub_categories or [])) for s in seller.specialties.all()],
        push_token=push_token_for(seller.user),
    )


class SellerStore:
    """ORM-backed geospatial store for sellers."""

    def find_within_sync(
        self,
        point: Tuple[float, float],
        radius_meters: float,
        filters: SellerFilters = SellerFilters(),
    ) -> List[MatchCandidate]:
        """
        Args:
            point: (longitude, latitude)
            radius_meters: search radius around point
            filters: status/availability/category constraints

        Returns:
            MatchCandidate list ordered nearest-first
        """
        lon, lat = float(point[0]), float(point[1])
        radius_km = float(radius_meters) / 1000.0

        qs = (
            Seller.objects
            .select_related("user", "user__device_token")
            .prefetch_related("specialties")
            .filter(status__in=list(filters.statuses))
            .order_by("id")
        )
        if filters.is_available is not None:
            qs = qs.filter(is_available=filters.is_available)
        if filters.category:
            qs = qs.filter(specialties__category=filters.category).distinct()

        min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, radius_km)
        qs = qs.filter(latitude__gte=min_lat, latitude__lte=max_lat)
        # A box crossing the antimeridian cannot be expressed as one range
        if min_lon >= -180.0 and max_lon <= 180.0:
            qs = qs.filter(longitude__gte=min_lon, longitude__lte=max_lon)

        results: List[Tuple[float, Seller]] = []
        for seller in qs:
            distance = distance_km(lat, lon, seller.latitude, seller.longitude)
            if distance > radius_km:
                continue
            if filters.sub_category and not self._has_sub_category(seller, filters):
                continue
            results.append((distance, seller))

        # Stable: equal distances keep id order
        results.sort(key=lambda item: item[0])

        logger.debug(
            "find_within (%s, %s) r=%sm -> %d sellers",
            lon, lat, radius_meters, len(results)
        )
        return [_to_candidate(seller, distance) for distance, seller in results]

    @staticmethod
    def _has_sub_category(seller: Seller, filters: SellerFilters) -> bool:
        return any(
            (filters.category is None or s.category == filters.category)
            and filters.sub_category in (s.sub_categories or [])
            for s in seller.specialties.all()
        )

    async def find_within(
        self,
        point: Tuple[float, float],
        radius_meters: float,
        filters: SellerFilters = SellerFilters(),
    ) -> List[MatchCandidate]:
        return await sync_to_async(self.find_within_sync)(point, radius_meters, filters)

    async def increment_stats(self, seller_id: int, **increments) -> int:
        """Atomic F() increment of named seller counters."""
        return await sync_to_async(Seller.increment_stats)(seller_id, **increments)
