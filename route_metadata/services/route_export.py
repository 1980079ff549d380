# path: route-metadata-api/route_metadata/services/route_export.py
"""Render a computed route as a GeoJSON or GPX download."""

from __future__ import annotations

import re
from typing import Any, Dict

import gpxpy.gpx

from route_metadata.models.route_models import RouteResponse
from route_metadata.services.metadata import parse_metadata


def export_filename(route: RouteResponse, extension: str) -> str:
    # Header-safe: ASCII word characters only
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", route.name).strip("_") or "route"
    return f"{stem}.{extension}"


def route_to_geojson(route: RouteResponse) -> Dict[str, Any]:
    """FeatureCollection whose first feature is the route line.

    Road-type segments follow as extra LineString features, so a re-import
    picks up the route itself.
    """
    line = []
    for p in route.points:
        position = [p.longitude, p.latitude]
        if p.elevation is not None:
            position.append(p.elevation)
        line.append(position)

    features = [
        {
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": line},
            "properties": {
                "id": route.id,
                "name": route.name,
                "description": route.description,
                "routeType": route.route_type.value,
                "totalDistance": route.total_distance,
                "totalElevationGain": route.total_elevation_gain,
                "estimatedDuration": route.estimated_duration,
            },
        }
    ]

    for seg in parse_metadata(route.metadata).road_type_segments or []:
        if len(seg.coordinates) < 2:
            continue
        features.append({
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": [list(c) for c in seg.coordinates]},
            "properties": {
                "roadType": seg.road_type,
                "color": seg.color,
                "distance": seg.distance,
                "startIndex": seg.start_index,
                "endIndex": seg.end_index,
            },
        })

    return {"type": "FeatureCollection", "features": features}


def route_to_gpx(route: RouteResponse) -> str:
    gpx = gpxpy.gpx.GPX()
    gpx.name = route.name
    gpx.description = route.description

    track = gpxpy.gpx.GPXTrack(name=route.name, description=route.description)
    segment = gpxpy.gpx.GPXTrackSegment()
    for p in route.points:
        segment.points.append(
            gpxpy.gpx.GPXTrackPoint(p.latitude, p.longitude, elevation=p.elevation, time=p.timestamp)
        )
    track.segments.append(segment)
    gpx.tracks.append(track)
    return gpx.to_xml()
