import asyncio
import time

import pytest

from conftest import ScriptedClassifier, generate_test_points
from route_metadata.models.route_models import RoutePoint
from route_metadata.road_types import BIKE_PATH, PAVED_ROAD, RESIDENTIAL, TRAIL, TravelMode
from route_metadata.services.road_classifier import Classification
from route_metadata.services.segmentation import build_segments, classify_points, segment_route
from route_metadata.utils.geo import polyline_length_m


def classes(*types):
    return [Classification(road_type=t) for t in types]


def assert_partition(segments, count):
    covered = []
    for seg in segments:
        covered.extend(range(seg.start_index, seg.end_index + 1))
    assert covered == list(range(count))


class TestBuildSegments:
    def test_groups_consecutive_types(self):
        points = generate_test_points(6)
        segs = build_segments(points, classes(BIKE_PATH, BIKE_PATH, RESIDENTIAL, RESIDENTIAL, RESIDENTIAL, BIKE_PATH))
        assert [(s.road_type, s.start_index, s.end_index) for s in segs] == [
            (BIKE_PATH, 0, 1),
            (RESIDENTIAL, 2, 4),
            (BIKE_PATH, 5, 5),
        ]
        assert_partition(segs, 6)

    def test_boundary_hop_belongs_to_entered_segment(self):
        points = generate_test_points(4)
        segs = build_segments(points, classes(BIKE_PATH, BIKE_PATH, TRAIL, TRAIL))
        lonlat = [(p.longitude, p.latitude) for p in points]

        assert segs[0].distance == pytest.approx(polyline_length_m(lonlat[0:2]), abs=0.01)
        assert segs[1].distance == pytest.approx(polyline_length_m(lonlat[1:4]), abs=0.01)
        # The entered segment's polyline starts at the previous boundary point
        assert segs[1].coordinates[0] == lonlat[1]
        assert len(segs[1].coordinates) == 3

    def test_distances_sum_to_route_length(self):
        points = generate_test_points(20)
        types = [BIKE_PATH if i % 5 < 3 else RESIDENTIAL for i in range(20)]
        segs = build_segments(points, classes(*types))
        total = polyline_length_m([(p.longitude, p.latitude) for p in points])
        assert sum(s.distance for s in segs) == pytest.approx(total, abs=0.1)
        assert_partition(segs, 20)

    def test_two_points_same_type_is_one_segment(self):
        segs = build_segments(generate_test_points(2), classes(BIKE_PATH, BIKE_PATH))
        assert len(segs) == 1
        assert (segs[0].start_index, segs[0].end_index) == (0, 1)

    def test_two_points_different_type_is_two_segments(self):
        segs = build_segments(generate_test_points(2), classes(BIKE_PATH, PAVED_ROAD))
        assert len(segs) == 2
        assert segs[0].distance == 0.0
        assert segs[1].distance > 0

    def test_single_point(self):
        segs = build_segments(generate_test_points(1), classes(TRAIL))
        assert len(segs) == 1
        assert segs[0].distance == 0.0
        assert len(segs[0].coordinates) == 1

    def test_no_points(self):
        assert build_segments([], []) == []

    def test_loop_segments_by_type_not_endpoints(self):
        start = RoutePoint(latitude=52.520008, longitude=13.404954)
        points = [
            start,
            RoutePoint(latitude=52.521, longitude=13.405),
            RoutePoint(latitude=52.522, longitude=13.406),
            start,
        ]
        segs = build_segments(points, classes(BIKE_PATH, BIKE_PATH, BIKE_PATH, BIKE_PATH))
        assert len(segs) == 1
        assert segs[0].distance > 0

    def test_colors_follow_type(self):
        segs = build_segments(generate_test_points(3), classes(BIKE_PATH, "SKI_LIFT", "SKI_LIFT"))
        assert segs[0].color == "#2E7D32"
        assert segs[1].color == "#9E9E9E"

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            build_segments(generate_test_points(3), classes(BIKE_PATH))


class TestClassifyPoints:
    def test_order_matches_input_despite_completion_order(self):
        points = generate_test_points(10)

        class ReverseDelay:
            async def classify(self, lat, lon, mode):
                # earlier points finish last
                await asyncio.sleep((52.53 - lat) * 0.5)
                return Classification(road_type=f"{lat:.6f}")

        result = asyncio.run(classify_points(points, TravelMode.CYCLING, ReverseDelay(), timeout=5, concurrency=10))
        assert [r.road_type for r in result] == [f"{p.latitude:.6f}" for p in points]

    def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        class Counting:
            async def classify(self, lat, lon, mode):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.005)
                in_flight -= 1
                return Classification(road_type=BIKE_PATH)

        asyncio.run(classify_points(generate_test_points(20), TravelMode.CYCLING, Counting(), timeout=5, concurrency=3))
        assert peak == 3

    def test_timeout_falls_back_for_every_point(self):
        slow = ScriptedClassifier(delay=1.0)
        result = asyncio.run(
            classify_points(generate_test_points(4), TravelMode.PEDESTRIAN, slow, timeout=0.05, concurrency=4)
        )
        assert [r.road_type for r in result] == [TRAIL] * 4
        assert all(r.is_fallback for r in result)

    def test_empty_route(self):
        assert asyncio.run(classify_points([], TravelMode.CYCLING, ScriptedClassifier())) == []


class TestSegmentRoute:
    def test_hundred_points_within_budget(self):
        points = generate_test_points(100)
        started = time.monotonic()
        segs = asyncio.run(
            segment_route(points, TravelMode.CYCLING, ScriptedClassifier(delay=0.01), timeout=8, concurrency=8)
        )
        assert time.monotonic() - started < 10
        assert [(s.road_type, s.start_index, s.end_index) for s in segs] == [
            (BIKE_PATH, 0, 29),
            (RESIDENTIAL, 30, 99),
        ]

    def test_idempotent(self):
        points = generate_test_points(40)
        first = asyncio.run(segment_route(points, TravelMode.CYCLING, ScriptedClassifier()))
        second = asyncio.run(segment_route(points, TravelMode.CYCLING, ScriptedClassifier()))
        assert first == second
