"""Common utility functions."""

from .geo import distance_km, bounding_box, EARTH_RADIUS_KM, KM_PER_DEGREE

__all__ = [
    "distance_km",
    "bounding_box",
    "EARTH_RADIUS_KM",
    "KM_PER_DEGREE",
]
