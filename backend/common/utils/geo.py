"""
Geographic utility functions.

This module provides core geospatial calculations used throughout the application.
"""

from math import asin, cos, degrees, pi, radians, sin, sqrt
from typing import Tuple

EARTH_RADIUS_KM = 6371.0

# Same sphere as distance_km, ~111.195 km per degree of latitude
KM_PER_DEGREE = pi * EARTH_RADIUS_KM / 180

# Keeps float noise at the box edge from dropping a point that is in range
BOX_PAD_DEGREES = 1e-6


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate great-circle distance between two points in kilometers (Haversine).

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    lat1, lon1, lat2, lon2 = map(radians, [float(lat1), float(lon1), float(lat2), float(lon2)])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Clamp rounding noise so asin never sees a > 1
    c = 2 * asin(sqrt(min(1.0, a)))
    return c * EARTH_RADIUS_KM

def bounding_box(lat: float, lon: float, radius_km: float) -> Tuple[float, float, float, float]:
    """
    Get a lat/lon box that fully contains the circle around a point.

    Used as a cheap index-friendly prefilter before the exact haversine check,
    so it must never be smaller than the haversine circle. The longitude
    half-width is the widest point of the spherical cap, not the width at the
    centre latitude.

    Returns:
        (min_lat, max_lat, min_lon, max_lon)
    """
    lat = float(lat)
    lon = float(lon)
    angular = float(radius_km) / EARTH_RADIUS_KM
    lat_offset = degrees(angular) + BOX_PAD_DEGREES

    if abs(lat) + lat_offset >= 90.0:
        # The circle reaches a pole, so every longitude is inside it
        lon_offset = 180.0
    else:
        lon_offset = min(180.0, degrees(asin(sin(angular) / cos(radians(lat)))) + BOX_PAD_DEGREES)

    return (
        max(-90.0, lat - lat_offset),
        min(90.0, lat + lat_offset),
        lon - lon_offset,
        lon + lon_offset,
    )
