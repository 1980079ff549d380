# path: route-metadata-api/route_metadata/services/road_classifier.py

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable

import httpx
from pydantic import ValidationError

from route_metadata import config
from route_metadata.models.road_type_models import OsmData
from route_metadata.road_types import TravelMode, classify_tags, default_road_type
from route_metadata.utils.geo import haversine_m, quantize

logger = logging.getLogger(__name__)


class ClassifierError(Exception):
    """Raised when the map-data provider fails or returns something unusable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Classification:
    road_type: str
    surface: Optional[str] = None
    osm_data: Optional[OsmData] = None
    # Set when the provider was unavailable; such results are not cached
    is_fallback: bool = False


@runtime_checkable
class RoadClassifier(Protocol):
    """Capability: coordinate + travel mode in, road-type classification out.

    Implementations must not raise for lookup failures; they return the
    mode default instead.
    """

    async def classify(self, lat: float, lon: float, mode: TravelMode) -> Classification: ...


def fallback_classification(mode: TravelMode) -> Classification:
    return Classification(road_type=default_road_type(mode), is_fallback=True)


class FallbackClassifier:
    """Static classifier: every point gets the travel mode's default type."""

    async def classify(self, lat: float, lon: float, mode: TravelMode) -> Classification:
        return fallback_classification(mode)


class OverpassClassifier:
    """Classify points from the OSM way nearest to them, via the Overpass API."""

    def __init__(
        self,
        url: str | None = None,
        radius_m: float | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url or config.OVERPASS_URL
        self.radius_m = radius_m if radius_m is not None else config.OVERPASS_RADIUS_M
        self.timeout = timeout if timeout is not None else config.OVERPASS_TIMEOUT_SECONDS
        self.client = client or httpx.AsyncClient(timeout=self.timeout)

    def build_query(self, lat: float, lon: float) -> str:
        server_timeout = max(1, int(self.timeout))
        return (
            f"[out:json][timeout:{server_timeout}];"
            f"way(around:{self.radius_m:g},{lat:.6f},{lon:.6f})[highway];"
            "out tags center;"
        )

    async def _query(self, lat: float, lon: float) -> list[Dict[str, Any]]:
        try:
            response = await self.client.post(self.url, data={"data": self.build_query(lat, lon)})
        except httpx.HTTPError as exc:
            raise ClassifierError(f"Overpass unreachable: {exc}") from exc

        if not response.is_success:
            raise ClassifierError("Overpass upstream error", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ClassifierError("Invalid JSON payload from Overpass") from exc

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            raise ClassifierError("Overpass payload missing elements")
        return elements

    def pick_way(
        self, elements: list[Dict[str, Any]], lat: float, lon: float, mode: TravelMode
    ) -> Optional[Tuple[str, Dict[str, str]]]:
        best = None
        best_dist = None
        for el in elements:
            if not isinstance(el, dict) or not isinstance(el.get("tags"), dict):
                continue
            # Non-string tag values are dropped
            tags = {k: v for k, v in el["tags"].items() if isinstance(k, str) and isinstance(v, str)}
            road_type = classify_tags(tags, mode)
            if road_type is None:
                continue
            center = el.get("center") or {}
            try:
                dist = haversine_m(lon, lat, float(center["lon"]), float(center["lat"]))
            except (KeyError, TypeError, ValueError):
                dist = float("inf")
            if best_dist is None or dist < best_dist:
                best = (road_type, tags)
                best_dist = dist
        return best

    async def classify(self, lat: float, lon: float, mode: TravelMode) -> Classification:
        try:
            elements = await self._query(lat, lon)
        except ClassifierError as exc:
            logger.warning("Road lookup failed at (%.6f, %.6f): %s", lat, lon, exc)
            return fallback_classification(mode)

        try:
            picked = self.pick_way(elements, lat, lon, mode)
            if picked is None:
                logger.debug("No classifiable way near (%.6f, %.6f)", lat, lon)
                return Classification(road_type=default_road_type(mode))

            road_type, tags = picked
            osm = OsmData(
                highway=tags.get("highway"),
                surface=tags.get("surface"),
                bicycle=tags.get("bicycle"),
                foot=tags.get("foot"),
                name=tags.get("name"),
            )
        except (TypeError, AttributeError, ValidationError) as exc:
            logger.warning("Unusable Overpass payload at (%.6f, %.6f): %s", lat, lon, exc)
            return fallback_classification(mode)
        return Classification(road_type=road_type, surface=tags.get("surface"), osm_data=osm)

    async def aclose(self) -> None:
        await self.client.aclose()


class CachingClassifier:
    """Read-through LRU cache in front of another classifier.

    Keys are quantized coordinates plus mode. Concurrent misses for the same
    key may both query the inner classifier; the last insert wins.
    """

    def __init__(self, inner: RoadClassifier, maxsize: int | None = None, places: int | None = None) -> None:
        self.inner = inner
        self.maxsize = maxsize if maxsize is not None else config.CLASSIFIER_CACHE_SIZE
        self.places = places if places is not None else config.CACHE_QUANTIZE_PLACES
        self._entries: "OrderedDict[tuple, Classification]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _key(self, lat: float, lon: float, mode: TravelMode) -> tuple:
        return quantize(lat, lon, self.places) + (mode.value,)

    async def classify(self, lat: float, lon: float, mode: TravelMode) -> Classification:
        key = self._key(lat, lon, mode)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return cached
            self.misses += 1

        result = await self.inner.classify(lat, lon, mode)
        if result.is_fallback:
            return result

        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
        return result

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    async def aclose(self) -> None:
        close = getattr(self.inner, "aclose", None)
        if close is not None:
            await close()


def build_classifier(backend: str | None = None) -> RoadClassifier:
    backend = (backend or config.CLASSIFIER_BACKEND).lower()
    if backend == "fallback":
        return FallbackClassifier()
    if backend == "overpass":
        return CachingClassifier(OverpassClassifier())
    raise ValueError(f"unknown classifier backend: {backend!r}")
