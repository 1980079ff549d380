# path: route-metadata-api/route_metadata/models/road_type_models.py

from __future__ import annotations

from typing import List, Literal, Optional, Tuple

from pydantic import ConfigDict, Field, field_validator

from route_metadata.models.route_models import CamelModel, RoutePoint
from route_metadata.road_types import TravelMode, parse_travel_mode

METADATA_VERSION = 1

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class OsmData(CamelModel):
    highway: Optional[str] = None
    surface: Optional[str] = None
    bicycle: Optional[str] = None
    foot: Optional[str] = None
    name: Optional[str] = None


class RoadTypeSegment(CamelModel):
    road_type: str
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    distance: float = Field(ge=0)
    color: str = Field(pattern=HEX_COLOR_PATTERN)
    coordinates: List[Tuple[float, float]]  # (lon, lat)
    surface: Optional[str] = None
    osm_data: Optional[OsmData] = None

    @field_validator("end_index")
    @classmethod
    def end_not_before_start(cls, v: int, info):
        start = info.data.get("start_index")
        if start is not None and v < start:
            raise ValueError("end_index must be >= start_index")
        return v


class RoadTypeStat(CamelModel):
    road_type: str
    distance: float = Field(ge=0)
    percentage: str
    segment_count: int = Field(ge=1)
    color: str = Field(pattern=HEX_COLOR_PATTERN)


class RoadTypeStats(CamelModel):
    breakdown: List[RoadTypeStat] = Field(default_factory=list)
    total_distance: float = Field(default=0.0, ge=0)
    total_types: int = Field(default=0, ge=0)


class RouteMetadata(CamelModel):
    """Metadata blob persisted alongside a route.

    Every field is optional so a blank instance doubles as the "no data"
    value returned when a stored blob cannot be read. Unknown keys from
    newer writers are dropped rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")

    version: int = METADATA_VERSION
    road_type_segments: Optional[List[RoadTypeSegment]] = None
    road_type_stats: Optional[RoadTypeStats] = None
    average_speed: Optional[float] = None
    max_elevation: Optional[float] = None
    min_elevation: Optional[float] = None
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    waypoints: Optional[List[str]] = None
    tags: Optional[List[str]] = None


class LiveMetadataRequest(CamelModel):
    """Waypoints being edited on the map, before any route is saved."""

    points: List[RoutePoint] = Field(min_length=1)
    mode: TravelMode = TravelMode.CYCLING

    @field_validator("mode", mode="before")
    @classmethod
    def resolve_mode_alias(cls, v):
        if isinstance(v, str):
            return parse_travel_mode(v)
        return v


DisplayState = Literal["ready", "empty"]
