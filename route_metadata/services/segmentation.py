# path: route-metadata-api/route_metadata/services/segmentation.py

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from route_metadata import config
from route_metadata.models.road_type_models import RoadTypeSegment
from route_metadata.models.route_models import RoutePoint
from route_metadata.road_types import TravelMode, color_for
from route_metadata.services.road_classifier import (
    Classification,
    RoadClassifier,
    fallback_classification,
)
from route_metadata.utils.geo import haversine_m

logger = logging.getLogger(__name__)


async def classify_points(
    points: Sequence[RoutePoint],
    mode: TravelMode,
    classifier: RoadClassifier,
    *,
    timeout: float | None = None,
    concurrency: int | None = None,
) -> List[Classification]:
    """Classify every point, at most ``concurrency`` lookups in flight.

    Output order matches ``points``. If the whole batch does not finish
    within ``timeout`` seconds every point gets the mode's fallback.
    """
    if not points:
        return []
    timeout = timeout if timeout is not None else config.CLASSIFICATION_TIMEOUT_SECONDS
    limit = asyncio.Semaphore(max(1, concurrency or config.CLASSIFIER_CONCURRENCY))

    async def one(p: RoutePoint) -> Classification:
        async with limit:
            return await classifier.classify(p.latitude, p.longitude, mode)

    try:
        return await asyncio.wait_for(asyncio.gather(*(one(p) for p in points)), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(
            "Road classification of %d points exceeded %.1fs; using %s fallback",
            len(points), timeout, mode.value,
        )
        return [fallback_classification(mode)] * len(points)


def _segment(
    points: Sequence[RoutePoint],
    classes: Sequence[Classification],
    start: int,
    end: int,
) -> RoadTypeSegment:
    first = classes[start]
    # The hop from the previous segment's last point belongs to this segment
    lead = start - 1 if start > 0 else start
    coords = [(points[i].longitude, points[i].latitude) for i in range(lead, end + 1)]
    distance = 0.0
    for i in range(1, len(coords)):
        a_lon, a_lat = coords[i - 1]
        b_lon, b_lat = coords[i]
        distance += haversine_m(a_lon, a_lat, b_lon, b_lat)

    return RoadTypeSegment(
        road_type=first.road_type,
        start_index=start,
        end_index=end,
        distance=round(distance, 2),
        color=color_for(first.road_type),
        coordinates=coords,
        surface=first.surface,
        osm_data=first.osm_data,
    )


def build_segments(
    points: Sequence[RoutePoint],
    classifications: Sequence[Classification],
) -> List[RoadTypeSegment]:
    """Group consecutive same-type points into segments covering every index."""
    if len(points) != len(classifications):
        raise ValueError("points and classifications must have the same length")
    if not points:
        return []

    segments = []
    start = 0
    for i in range(1, len(points)):
        if classifications[i].road_type != classifications[start].road_type:
            segments.append(_segment(points, classifications, start, i - 1))
            start = i
    segments.append(_segment(points, classifications, start, len(points) - 1))
    return segments


async def segment_route(
    points: Sequence[RoutePoint],
    mode: TravelMode,
    classifier: RoadClassifier,
    *,
    timeout: float | None = None,
    concurrency: int | None = None,
) -> List[RoadTypeSegment]:
    classes = await classify_points(points, mode, classifier, timeout=timeout, concurrency=concurrency)
    return build_segments(points, classes)
