# path: route-metadata-api/route_metadata/models/route_models.py

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every wire model: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PointType(str, Enum):
    START_POINT = "START_POINT"
    WAYPOINT = "WAYPOINT"
    END_POINT = "END_POINT"


class RouteType(str, Enum):
    CYCLING = "CYCLING"
    WALKING = "WALKING"
    RUNNING = "RUNNING"
    HIKING = "HIKING"
    DRIVING = "DRIVING"


class RoutePoint(CamelModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    elevation: Optional[float] = None
    point_type: Optional[PointType] = None
    timestamp: Optional[datetime] = None


def assign_point_types(points: List[RoutePoint]) -> List[RoutePoint]:
    """Fill in missing point types by position; explicit types are kept."""
    last = len(points) - 1
    out = []
    for i, p in enumerate(points):
        if p.point_type is not None:
            out.append(p)
            continue
        if i == 0:
            kind = PointType.START_POINT
        elif i == last:
            kind = PointType.END_POINT
        else:
            kind = PointType.WAYPOINT
        out.append(p.model_copy(update={"point_type": kind}))
    return out


class RouteRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    route_type: RouteType = RouteType.CYCLING
    is_public: bool = False
    points: List[RoutePoint] = Field(min_length=1)
    # Serialized RouteMetadata supplied by the client; may be garbage
    metadata: Optional[str] = None

    @model_validator(mode="after")
    def fill_point_types(self):
        self.points = assign_point_types(self.points)
        return self


class RouteResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    route_type: RouteType
    is_public: bool
    points: List[RoutePoint]
    metadata: str
    total_distance: float = Field(ge=0)
    total_elevation_gain: float = Field(ge=0)
    estimated_duration: int = Field(ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
