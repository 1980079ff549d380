# path: route-metadata-api/route_metadata/services/road_type_stats.py

from __future__ import annotations

import math
from typing import Dict, List, Sequence

from route_metadata.models.road_type_models import RoadTypeSegment, RoadTypeStat, RoadTypeStats
from route_metadata.road_types import color_for

PERCENT_DECIMALS = 1


def apportion_percentages(distances: Sequence[float], decimals: int = PERCENT_DECIMALS) -> List[str]:
    """Format shares of the total as percentages that add up to exactly 100.

    Largest-remainder rounding: every share is floored to the display
    precision, then the leftover units go to the shares with the biggest
    fractional parts. A zero total gives all zeros.
    """
    fmt = f"{{:.{decimals}f}}"
    total = sum(distances)
    if total <= 0:
        return [fmt.format(0.0)] * len(distances)

    scale = 100 * 10 ** decimals
    raw = [d / total * scale for d in distances]
    units = [math.floor(r) for r in raw]
    leftover = scale - sum(units)
    by_remainder = sorted(range(len(raw)), key=lambda i: (-(raw[i] - units[i]), i))
    for i in by_remainder[:leftover]:
        units[i] += 1
    return [fmt.format(u / 10 ** decimals) for u in units]


def aggregate(segments: Sequence[RoadTypeSegment]) -> RoadTypeStats:
    distance_by_type: Dict[str, float] = {}
    count_by_type: Dict[str, int] = {}
    for seg in segments:
        distance_by_type[seg.road_type] = distance_by_type.get(seg.road_type, 0.0) + seg.distance
        count_by_type[seg.road_type] = count_by_type.get(seg.road_type, 0) + 1

    order = sorted(distance_by_type, key=lambda t: (-distance_by_type[t], t))
    percentages = apportion_percentages([distance_by_type[t] for t in order])

    breakdown = [
        RoadTypeStat(
            road_type=road_type,
            distance=round(distance_by_type[road_type], 2),
            percentage=pct,
            segment_count=count_by_type[road_type],
            color=color_for(road_type),
        )
        for road_type, pct in zip(order, percentages)
    ]
    return RoadTypeStats(
        breakdown=breakdown,
        total_distance=round(sum(distance_by_type.values()), 2),
        total_types=len(breakdown),
    )
