# path: route-metadata-api/route_metadata/services/route_builder.py

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from route_metadata.models.route_models import RoutePoint, RouteRequest, RouteResponse, RouteType
from route_metadata.road_types import MODE_SPEEDS_KMH, mode_for_route_type
from route_metadata.services.metadata import RouteMetadataEngine, parse_metadata, serialize_metadata
from route_metadata.utils.geo import bbox_wgs84, polyline_length_m

logger = logging.getLogger(__name__)


def elevation_gain_m(points: Sequence[RoutePoint]) -> float:
    gain = 0.0
    prev = None
    for p in points:
        if p.elevation is None:
            continue
        if prev is not None and p.elevation > prev:
            gain += p.elevation - prev
        prev = p.elevation
    return gain


def estimate_duration_s(distance_m: float, route_type: RouteType) -> int:
    meters_per_second = MODE_SPEEDS_KMH[route_type] * 1000.0 / 3600.0
    return int(round(distance_m / meters_per_second))


async def build_route(request: RouteRequest, engine: RouteMetadataEngine) -> RouteResponse:
    points = request.points
    mode = mode_for_route_type(request.route_type)
    base = parse_metadata(request.metadata)

    metadata = await engine.compute(
        points, mode, base=base, speed_kmh=MODE_SPEEDS_KMH[request.route_type],
    )

    total = polyline_length_m([(p.longitude, p.latitude) for p in points])
    route_id = str(uuid.uuid4())
    logger.info(
        "Built route %s: %d points, %.1f m, bbox=%s",
        route_id, len(points), total,
        bbox_wgs84((p.longitude, p.latitude) for p in points),
    )

    return RouteResponse(
        id=route_id,
        name=request.name,
        description=request.description,
        route_type=request.route_type,
        is_public=request.is_public,
        points=points,
        metadata=serialize_metadata(metadata),
        total_distance=round(total, 2),
        total_elevation_gain=round(elevation_gain_m(points), 2),
        estimated_duration=estimate_duration_s(total, request.route_type),
    )
