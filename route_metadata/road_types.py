# path: route-metadata-api/route_metadata/road_types.py
"""Road-type categories, their display colors, and the OSM tag rules that
pick a category for a given travel mode.

Categories are plain strings. The table below registers the ones this
service produces; anything else that turns up in stored metadata still
renders, with the UNKNOWN color.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional

from route_metadata.models.route_models import RouteType

BIKE_PATH = "BIKE_PATH"
SHARED_USE_PATH = "SHARED_USE_PATH"
PAVED_ROAD = "PAVED_ROAD"
RESIDENTIAL = "RESIDENTIAL"
GRAVEL = "GRAVEL"
TRAIL = "TRAIL"
PEDESTRIAN_ONLY = "PEDESTRIAN_ONLY"
MAJOR_ROAD = "MAJOR_ROAD"
HIGHWAY = "HIGHWAY"
UNKNOWN = "UNKNOWN"

ROAD_TYPE_COLORS: Dict[str, str] = {
    BIKE_PATH: "#2E7D32",
    SHARED_USE_PATH: "#66BB6A",
    PAVED_ROAD: "#1976D2",
    RESIDENTIAL: "#90CAF9",
    GRAVEL: "#A1887F",
    TRAIL: "#6D4C41",
    PEDESTRIAN_ONLY: "#AB47BC",
    MAJOR_ROAD: "#F57C00",
    HIGHWAY: "#D32F2F",
    UNKNOWN: "#9E9E9E",
}

ROAD_TYPE_LABELS: Dict[str, str] = {
    BIKE_PATH: "Bike Path",
    SHARED_USE_PATH: "Shared Use Path",
    PAVED_ROAD: "Paved Road",
    RESIDENTIAL: "Residential",
    GRAVEL: "Gravel",
    TRAIL: "Trail",
    PEDESTRIAN_ONLY: "Pedestrian Only",
    MAJOR_ROAD: "Major Road",
    HIGHWAY: "Highway",
    UNKNOWN: "Unknown",
}


class TravelMode(str, Enum):
    CYCLING = "cycling"
    PEDESTRIAN = "pedestrian"
    DRIVING = "driving"


_MODE_ALIASES: Dict[str, TravelMode] = {
    "cycling": TravelMode.CYCLING,
    "bicycle": TravelMode.CYCLING,
    "bike": TravelMode.CYCLING,
    "pedestrian": TravelMode.PEDESTRIAN,
    "foot": TravelMode.PEDESTRIAN,
    "walking": TravelMode.PEDESTRIAN,
    "running": TravelMode.PEDESTRIAN,
    "hiking": TravelMode.PEDESTRIAN,
    "driving": TravelMode.DRIVING,
    "auto": TravelMode.DRIVING,
    "car": TravelMode.DRIVING,
}

_ROUTE_TYPE_MODES: Dict[RouteType, TravelMode] = {
    RouteType.CYCLING: TravelMode.CYCLING,
    RouteType.WALKING: TravelMode.PEDESTRIAN,
    RouteType.RUNNING: TravelMode.PEDESTRIAN,
    RouteType.HIKING: TravelMode.PEDESTRIAN,
    RouteType.DRIVING: TravelMode.DRIVING,
}

DEFAULT_ROAD_TYPES: Dict[TravelMode, str] = {
    TravelMode.CYCLING: PAVED_ROAD,
    TravelMode.PEDESTRIAN: TRAIL,
    TravelMode.DRIVING: PAVED_ROAD,
}

# Average moving speeds (km/h) used for duration estimates
MODE_SPEEDS_KMH: Dict[RouteType, float] = {
    RouteType.CYCLING: 18.0,
    RouteType.WALKING: 5.0,
    RouteType.RUNNING: 10.0,
    RouteType.HIKING: 4.0,
    RouteType.DRIVING: 50.0,
}


def parse_travel_mode(value: str) -> TravelMode:
    mode = _MODE_ALIASES.get(value.strip().lower())
    if mode is None:
        raise ValueError(f"unknown travel mode: {value!r}")
    return mode


def mode_for_route_type(route_type: RouteType) -> TravelMode:
    return _ROUTE_TYPE_MODES[route_type]


def color_for(road_type: str) -> str:
    return ROAD_TYPE_COLORS.get(road_type, ROAD_TYPE_COLORS[UNKNOWN])


def label_for(road_type: str) -> str:
    label = ROAD_TYPE_LABELS.get(road_type)
    if label is None:
        label = road_type.replace("_", " ").title()
    return label


def default_road_type(mode: TravelMode) -> str:
    return DEFAULT_ROAD_TYPES[mode]


_MOTORWAYS = {"motorway", "motorway_link", "trunk", "trunk_link"}
_ARTERIALS = {"primary", "primary_link", "secondary", "secondary_link"}
_MINOR_ROADS = {"tertiary", "tertiary_link", "unclassified", "road"}
_RESIDENTIAL = {"residential", "living_street", "service"}
_FOOT_ONLY = {"footway", "pedestrian", "steps", "corridor"}
_UNPAVED_SURFACES = {
    "unpaved", "gravel", "fine_gravel", "compacted", "dirt", "earth",
    "ground", "grass", "mud", "sand", "pebblestone", "woodchips",
}
_ALLOWED = {"yes", "designated", "permissive"}


def _is_unpaved(tags: Mapping[str, str]) -> bool:
    return tags.get("surface", "") in _UNPAVED_SURFACES


def classify_tags(tags: Mapping[str, str], mode: TravelMode) -> Optional[str]:
    """Map the tags of an OSM way to a road type for ``mode``.

    Returns None when the way carries no usable ``highway`` tag so callers
    can fall back to the mode default.
    """
    highway = tags.get("highway")
    if not highway:
        return None
    bicycle = tags.get("bicycle", "")
    foot = tags.get("foot", "")

    if mode is TravelMode.CYCLING:
        if highway == "cycleway":
            return SHARED_USE_PATH if foot == "designated" else BIKE_PATH
        if highway in _FOOT_ONLY:
            return SHARED_USE_PATH if bicycle in _ALLOWED else PEDESTRIAN_ONLY
        if highway in ("path", "bridleway"):
            if bicycle == "designated":
                return BIKE_PATH
            return GRAVEL if _is_unpaved(tags) else SHARED_USE_PATH
        if highway == "track":
            return GRAVEL
        if highway in _RESIDENTIAL:
            return RESIDENTIAL
        if highway in _MOTORWAYS:
            return MAJOR_ROAD
        if highway in _ARTERIALS or highway in _MINOR_ROADS:
            return GRAVEL if _is_unpaved(tags) else PAVED_ROAD
        return None

    if mode is TravelMode.PEDESTRIAN:
        if highway in _FOOT_ONLY:
            return PEDESTRIAN_ONLY
        if highway in ("path", "track", "bridleway"):
            return TRAIL
        if highway == "cycleway":
            return SHARED_USE_PATH if foot in _ALLOWED else BIKE_PATH
        if highway in _RESIDENTIAL:
            return RESIDENTIAL
        if highway in _MOTORWAYS:
            return MAJOR_ROAD
        if highway in _ARTERIALS or highway in _MINOR_ROADS:
            return TRAIL if _is_unpaved(tags) else PAVED_ROAD
        return None

    # driving
    if highway in _MOTORWAYS:
        return HIGHWAY
    if highway in _ARTERIALS:
        return MAJOR_ROAD
    if highway in _MINOR_ROADS:
        return GRAVEL if _is_unpaved(tags) else PAVED_ROAD
    if highway in _RESIDENTIAL:
        return RESIDENTIAL
    if highway == "track":
        return GRAVEL
    if highway in ("cycleway", "path", "bridleway"):
        return BIKE_PATH if highway == "cycleway" else TRAIL
    if highway in _FOOT_ONLY:
        return PEDESTRIAN_ONLY
    return None
