from __future__ import annotations

import pytest

from src.domain.algorithms.geo_utils import (
    bounding_box,
    haversine_distance_m,
    polyline_distance_m,
    slice_polyline,
)
from src.domain.models.geo import GeoPoint


@pytest.mark.unit
def test_haversine_zero_for_identical_points() -> None:
    p = GeoPoint(lat=59.33, lon=18.06)
    assert haversine_distance_m(p, p) == 0.0


@pytest.mark.unit
def test_haversine_is_symmetric_and_reasonable_scale() -> None:
    # Rough sanity check: 1 degree of latitude is about 111km.
    a = GeoPoint(lat=0.0, lon=0.0)
    b = GeoPoint(lat=1.0, lon=0.0)

    d1 = haversine_distance_m(a, b)
    d2 = haversine_distance_m(b, a)

    assert abs(d1 - d2) < 1e-6
    assert 100_000.0 < d1 < 120_000.0


@pytest.mark.unit
def test_bounding_box_of_points() -> None:
    sw, ne = bounding_box(
        [GeoPoint(lat=59.8, lon=17.6), GeoPoint(lat=59.3, lon=18.1)]
    )

    assert (sw.lat, sw.lon) == (59.3, 17.6)
    assert (ne.lat, ne.lon) == (59.8, 18.1)
    assert bounding_box([]) is None


@pytest.mark.unit
def test_slice_polyline_follows_travel_direction() -> None:
    line = tuple(GeoPoint(lat=0.0, lon=float(i) / 100) for i in range(5))
    start = GeoPoint(lat=0.0, lon=0.031)
    end = GeoPoint(lat=0.0, lon=0.009)

    part = slice_polyline(line, start=start, end=end)

    assert part[0] == start
    assert part[-1] == end
    assert [p.lon for p in part[1:-1]] == [0.02]
    assert polyline_distance_m(part) == pytest.approx(
        haversine_distance_m(start, end), rel=1e-6
    )
