# path: route-metadata-api/route_metadata/utils/geo.py

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple
import math

EARTH_RADIUS_M = 6371000.0


def bbox_wgs84(points_lonlat: Iterable[Tuple[float, float]]) -> Dict[str, float]:
    lons = []
    lats = []
    for lon, lat in points_lonlat:
        lons.append(lon)
        lats.append(lat)
    if not lons:
        raise ValueError("bbox of an empty point sequence is undefined")
    return {
        "min_lat": min(lats),
        "min_lon": min(lons),
        "max_lat": max(lats),
        "max_lon": max(lons),
    }


def haversine_m(a_lon: float, a_lat: float, b_lon: float, b_lat: float) -> float:
    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dphi = math.radians(b_lat - a_lat)
    dlmb = math.radians(b_lon - a_lon)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # Float error can push s a hair past 1 for antipodal points
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, s)))


def polyline_length_m(points_lonlat: List[Tuple[float, float]]) -> float:
    total = 0.0
    for i in range(1, len(points_lonlat)):
        a_lon, a_lat = points_lonlat[i - 1]
        b_lon, b_lat = points_lonlat[i]
        total += haversine_m(a_lon, a_lat, b_lon, b_lat)
    return total


def quantize(lat: float, lon: float, places: int) -> Tuple[float, float]:
    """Snap a coordinate to a grid so float jitter maps to the same key.

    Five places is roughly a 1 m cell at mid latitudes.
    """
    return (round(lat, places), round(lon, places))
