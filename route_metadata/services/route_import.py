# path: route-metadata-api/route_metadata/services/route_import.py
"""Turn GeoJSON and GPX documents into route requests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import gpxpy
import gpxpy.gpx
from pydantic import ValidationError

from route_metadata.models.route_models import RoutePoint, RouteRequest, RouteType

DEFAULT_IMPORT_NAME = "Imported Route"


class RouteImportError(ValueError):
    """Raised when an uploaded document holds no usable route."""


def _first_line(obj: Dict[str, Any]) -> Tuple[Optional[List], Dict[str, Any]]:
    kind = obj.get("type")
    if kind == "FeatureCollection":
        features = obj.get("features") or []
        if not isinstance(features, list):
            raise RouteImportError("GeoJSON features must be an array")
        for feature in features:
            if isinstance(feature, dict):
                coords, props = _first_line(feature)
                if coords:
                    return coords, props
        return None, {}
    if kind == "Feature":
        geometry = obj.get("geometry")
        if not isinstance(geometry, dict):
            return None, {}
        props = obj.get("properties") or {}
        if not isinstance(props, dict):
            raise RouteImportError("GeoJSON properties must be an object")
        coords, _ = _first_line(geometry)
        return coords, props
    if kind == "LineString":
        return _positions(obj.get("coordinates")), {}
    if kind == "MultiLineString":
        parts = _positions(obj.get("coordinates"))
        return (_positions(parts[0]) if parts else None), {}
    return None, {}


def _positions(value: Any) -> Optional[List]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise RouteImportError("GeoJSON coordinates must be an array")
    return value


def _build_request(
    points: List[RoutePoint],
    name: Optional[str],
    description: Optional[str],
    route_type: RouteType,
) -> RouteRequest:
    try:
        return RouteRequest(
            name=name or DEFAULT_IMPORT_NAME,
            description=description,
            route_type=route_type,
            points=points,
        )
    except ValidationError as exc:
        raise RouteImportError(f"Imported route is invalid: {exc.errors()[0]['msg']}") from exc


def points_from_geojson(payload: Any, route_type: RouteType = RouteType.CYCLING) -> RouteRequest:
    if not isinstance(payload, dict):
        raise RouteImportError("GeoJSON payload must be an object")

    coords, props = _first_line(payload)
    if not coords:
        raise RouteImportError("GeoJSON contains no LineString geometry")

    points = []
    for position in coords:
        if not isinstance(position, (list, tuple)) or len(position) < 2:
            raise RouteImportError(f"Malformed GeoJSON position: {position!r}")
        try:
            points.append(
                RoutePoint(
                    longitude=position[0],
                    latitude=position[1],
                    elevation=position[2] if len(position) > 2 else None,
                )
            )
        except ValidationError as exc:
            raise RouteImportError(f"Invalid coordinate {position!r}: {exc.errors()[0]['msg']}") from exc

    return _build_request(points, props.get("name"), props.get("description"), route_type)


def points_from_gpx(text: str, route_type: RouteType = RouteType.CYCLING) -> RouteRequest:
    try:
        gpx = gpxpy.parse(text)
    except gpxpy.gpx.GPXException as exc:
        raise RouteImportError(f"Invalid GPX document: {exc}") from exc

    name = gpx.name
    description = gpx.description
    raw = []
    for track in gpx.tracks:
        for segment in track.segments:
            raw.extend(segment.points)
        if raw:
            name = track.name or name
            description = track.description or description
            break
    if not raw:
        for rte in gpx.routes:
            if rte.points:
                raw = list(rte.points)
                name = rte.name or name
                description = rte.description or description
                break
    if not raw:
        raw = list(gpx.waypoints)
    if not raw:
        raise RouteImportError("GPX contains no track, route or waypoints")

    try:
        points = [
            RoutePoint(
                latitude=p.latitude,
                longitude=p.longitude,
                elevation=p.elevation,
                timestamp=p.time,
            )
            for p in raw
        ]
    except ValidationError as exc:
        raise RouteImportError(f"Invalid GPX coordinate: {exc.errors()[0]['msg']}") from exc

    return _build_request(points, name, description, route_type)
