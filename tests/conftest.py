"""Shared fixtures for route metadata tests.

Provides:
- ScriptedClassifier: deterministic stand-in for the OSM lookup
- generate_test_points: the synthetic Berlin route used across tests
- client: TestClient with the metadata engine wired to a ScriptedClassifier
"""

import asyncio
import os

import pytest

# Never reach out to Overpass from tests, even if a real engine gets built
os.environ.setdefault("CLASSIFIER_BACKEND", "fallback")

from fastapi.testclient import TestClient

from route_metadata.api.routes.routes import get_metadata_engine
from route_metadata.main import app
from route_metadata.models.route_models import PointType, RoutePoint
from route_metadata.road_types import (
    BIKE_PATH,
    PAVED_ROAD,
    PEDESTRIAN_ONLY,
    RESIDENTIAL,
    TRAIL,
    TravelMode,
)
from route_metadata.services.metadata import RouteMetadataEngine
from route_metadata.services.road_classifier import Classification

BERLIN_LAT = 52.520008
BERLIN_LON = 13.404954

# Latitude where the scripted network switches from one road type to another
SCRIPTED_BOUNDARY_LAT = 52.55


def scripted_rule(lat, lon, mode):
    north = lat >= SCRIPTED_BOUNDARY_LAT
    if mode is TravelMode.CYCLING:
        return RESIDENTIAL if north else BIKE_PATH
    if mode is TravelMode.PEDESTRIAN:
        return PEDESTRIAN_ONLY if north else TRAIL
    return PAVED_ROAD


class ScriptedClassifier:
    """Classifies by a plain function of (lat, lon, mode) and records calls."""

    def __init__(self, rule=scripted_rule, delay=0.0):
        self.rule = rule
        self.delay = delay
        self.calls = []

    async def classify(self, lat, lon, mode):
        self.calls.append((lat, lon, mode))
        if self.delay:
            await asyncio.sleep(self.delay)
        return Classification(road_type=self.rule(lat, lon, mode))


def generate_test_points(count):
    points = []
    for i in range(count):
        if i == 0:
            kind = PointType.START_POINT
        elif i == count - 1:
            kind = PointType.END_POINT
        else:
            kind = PointType.WAYPOINT
        points.append(
            RoutePoint(
                latitude=BERLIN_LAT + i * 0.001,
                longitude=BERLIN_LON + i * 0.001,
                elevation=34.0 + i,
                point_type=kind,
            )
        )
    return points


def points_payload(points):
    return [p.model_dump(mode="json", by_alias=True, exclude_none=True) for p in points]


@pytest.fixture
def scripted():
    return ScriptedClassifier()


@pytest.fixture
def engine(scripted):
    return RouteMetadataEngine(scripted, timeout=5.0, concurrency=8)


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_metadata_engine] = lambda: engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


SAMPLE_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {
                "type": "LineString",
                "coordinates": [[-122.3321, 47.6062, 10], [-122.3421, 47.6162, 15]],
            },
            "properties": {"name": "Test Route", "description": "A test cycling route"},
        }
    ],
}

SAMPLE_GPX = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="Test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Test Track</name>
    <trkseg>
      <trkpt lat="47.6062" lon="-122.3321">
        <ele>10</ele>
        <time>2023-01-01T12:00:00Z</time>
      </trkpt>
      <trkpt lat="47.6162" lon="-122.3421">
        <ele>15</ele>
        <time>2023-01-01T12:01:00Z</time>
      </trkpt>
    </trkseg>
  </trk>
</gpx>"""
