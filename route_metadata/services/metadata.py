# path: route-metadata-api/route_metadata/services/metadata.py

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from pydantic import ValidationError

from route_metadata.models.road_type_models import DisplayState, RouteMetadata
from route_metadata.models.route_models import RoutePoint
from route_metadata.road_types import TravelMode
from route_metadata.services.road_classifier import RoadClassifier
from route_metadata.services.road_type_stats import aggregate
from route_metadata.services.segmentation import segment_route

logger = logging.getLogger(__name__)

# Fields computed from the points; a client-supplied blob never overrides them
_DERIVED_FIELDS = {
    "road_type_segments",
    "road_type_stats",
    "average_speed",
    "max_elevation",
    "min_elevation",
    "version",
}


def serialize_metadata(metadata: RouteMetadata) -> str:
    return metadata.model_dump_json(by_alias=True, exclude_none=True)


def parse_metadata(raw: Optional[str]) -> RouteMetadata:
    """Read a stored blob. Anything unreadable comes back as empty metadata."""
    if raw is None or not raw.strip():
        return RouteMetadata()
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        logger.warning("Discarding unparseable route metadata: %s", exc)
        return RouteMetadata()
    if not isinstance(data, dict):
        logger.warning("Discarding route metadata of type %s", type(data).__name__)
        return RouteMetadata()
    try:
        return RouteMetadata.model_validate(data)
    except ValidationError as exc:
        logger.warning("Discarding invalid route metadata (%d errors)", exc.error_count())
        return RouteMetadata()


def display_state(metadata: RouteMetadata) -> DisplayState:
    stats = metadata.road_type_stats
    if stats is None or not stats.breakdown:
        return "empty"
    return "ready"


class RouteMetadataEngine:
    """Recomputes a route's metadata from scratch on every call."""

    def __init__(
        self,
        classifier: RoadClassifier,
        timeout: float | None = None,
        concurrency: int | None = None,
    ) -> None:
        self.classifier = classifier
        self.timeout = timeout
        self.concurrency = concurrency

    async def compute(
        self,
        points: Sequence[RoutePoint],
        mode: TravelMode,
        base: Optional[RouteMetadata] = None,
        speed_kmh: Optional[float] = None,
    ) -> RouteMetadata:
        segments = await segment_route(
            points, mode, self.classifier,
            timeout=self.timeout, concurrency=self.concurrency,
        )
        stats = aggregate(segments)

        elevations = [p.elevation for p in points if p.elevation is not None]
        kept = {}
        if base is not None:
            kept = base.model_dump(exclude=_DERIVED_FIELDS, exclude_none=True)

        logger.debug(
            "Computed %d segments / %d road types over %.1f m (%s)",
            len(segments), stats.total_types, stats.total_distance, mode.value,
        )
        return RouteMetadata(
            road_type_segments=segments,
            road_type_stats=stats,
            average_speed=speed_kmh,
            max_elevation=max(elevations) if elevations else None,
            min_elevation=min(elevations) if elevations else None,
            **kept,
        )

    async def aclose(self) -> None:
        close = getattr(self.classifier, "aclose", None)
        if close is not None:
            await close()
