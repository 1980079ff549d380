# path: route-metadata-api/route_metadata/api/routes/routes.py

from __future__ import annotations

import json
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from route_metadata.models.road_type_models import LiveMetadataRequest, RouteMetadata
from route_metadata.models.route_models import RouteRequest, RouteResponse, RouteType, assign_point_types
from route_metadata.road_types import MODE_SPEEDS_KMH, TravelMode
from route_metadata.services.metadata import RouteMetadataEngine
from route_metadata.services.road_classifier import build_classifier
from route_metadata.services.route_builder import build_route
from route_metadata.services.route_export import export_filename, route_to_geojson, route_to_gpx
from route_metadata.services.route_import import RouteImportError, points_from_geojson, points_from_gpx

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["routes"])

_LIVE_SPEEDS = {
    TravelMode.CYCLING: MODE_SPEEDS_KMH[RouteType.CYCLING],
    TravelMode.PEDESTRIAN: MODE_SPEEDS_KMH[RouteType.WALKING],
    TravelMode.DRIVING: MODE_SPEEDS_KMH[RouteType.DRIVING],
}


@lru_cache(maxsize=1)
def get_metadata_engine() -> RouteMetadataEngine:
    return RouteMetadataEngine(build_classifier())


@router.post("", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    body: RouteRequest,
    engine: RouteMetadataEngine = Depends(get_metadata_engine),
) -> RouteResponse:
    # Stateless: the route is computed and returned, never stored.
    return await build_route(body, engine)


@router.post("/metadata", response_model=RouteMetadata, response_model_exclude_none=True)
async def live_metadata(
    body: LiveMetadataRequest,
    engine: RouteMetadataEngine = Depends(get_metadata_engine),
) -> RouteMetadata:
    points = assign_point_types(body.points)
    return await engine.compute(points, body.mode, speed_kmh=_LIVE_SPEEDS[body.mode])


@router.post("/import/geojson/raw", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def import_geojson(
    request: Request,
    route_type: RouteType = RouteType.CYCLING,
    engine: RouteMetadataEngine = Depends(get_metadata_engine),
) -> RouteResponse:
    raw = await request.body()
    try:
        route_request = points_from_geojson(json.loads(raw), route_type)
    except ValueError as e:
        # RouteImportError and JSONDecodeError are both ValueErrors
        logger.info("Rejected GeoJSON import: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return await build_route(route_request, engine)


@router.post("/import/gpx/raw", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def import_gpx(
    request: Request,
    route_type: RouteType = RouteType.CYCLING,
    engine: RouteMetadataEngine = Depends(get_metadata_engine),
) -> RouteResponse:
    raw = await request.body()
    try:
        route_request = points_from_gpx(raw.decode("utf-8"), route_type)
    except (RouteImportError, UnicodeDecodeError) as e:
        logger.info("Rejected GPX import: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return await build_route(route_request, engine)


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.post("/export/geojson")
async def export_geojson(route: RouteResponse) -> JSONResponse:
    return JSONResponse(
        route_to_geojson(route),
        media_type="application/json",
        headers=_attachment(export_filename(route, "geojson")),
    )


@router.post("/export/gpx")
async def export_gpx(route: RouteResponse) -> Response:
    return Response(
        content=route_to_gpx(route),
        media_type="application/xml",
        headers=_attachment(export_filename(route, "gpx")),
    )
