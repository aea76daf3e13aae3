# tests/test_tile_geometry.py
# テストコード for tile_geometry.py
# pytestを使用

import sys
import os
import re

import pytest

BIN_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../bin'))
if BIN_DIR not in sys.path:
    sys.path.insert(0, BIN_DIR)

from tile_geometry import (
    GEOMETRY_Z, format_number, get_tile_corners, tile_to_feature, tile_to_geometry,
    tile_to_polygon, tiles_to_feature_collection,
)

# 図幅 556236300 の四隅（GCJ-02）
EXPECTED_CORNERS = [
    (111.84648227716731, 30.62728190721755),
    (111.84648417243615, 30.649263977286452),
    (111.86841269240549, 30.649227710764272),
    (111.86841080660852, 30.62724564013721),
    (111.84648227716731, 30.62728190721755),
]


def parse_ring(wkt):
    body = re.search(r'\(\((.*)\)\)', wkt).group(1)
    return [tuple(float(v) for v in p.split()) for p in body.split(', ')]


def test_format_number():
    assert format_number(111.84648227716731) == "111.84648227716731"
    assert format_number(1000000.0) == "1000000"
    assert format_number(-0.5) == "-0.5"
    assert format_number(0.00001) == "0.00001"


def test_tile_to_geometry_3d():
    wkt = tile_to_geometry(556236300, 3)
    assert wkt.startswith("POLYGON Z ((")
    ring = parse_ring(wkt)
    assert len(ring) == 5
    for (x, y, z), (ex, ey) in zip(ring, EXPECTED_CORNERS):
        assert x == pytest.approx(ex, abs=1e-9)
        assert y == pytest.approx(ey, abs=1e-9)
        assert z == GEOMETRY_Z
    assert " -1000000," in wkt


def test_tile_to_geometry_2d():
    wkt = tile_to_geometry(556236300, 2)
    assert wkt.startswith("POLYGON ((")
    ring = parse_ring(wkt)
    assert len(ring) == 5
    assert ring[0] == ring[-1]
    for (x, y), (ex, ey) in zip(ring, EXPECTED_CORNERS):
        assert x == pytest.approx(ex, abs=1e-9)
        assert y == pytest.approx(ey, abs=1e-9)


def test_other_dimension_is_3d():
    assert tile_to_geometry(556236300, 4) == tile_to_geometry(556236300, 3)


def test_tile_corners_round_trip_through_wkt():
    # WKTに書いた数値は元の浮動小数点に戻る
    ring = parse_ring(tile_to_geometry(556236300, 2))
    assert ring == get_tile_corners(556236300)


def test_tile_to_polygon():
    polygon = tile_to_polygon(556236300)
    assert polygon.is_valid
    minx, miny, maxx, maxy = polygon.bounds
    assert minx == pytest.approx(111.84648227716731, abs=1e-9)
    assert maxy == pytest.approx(30.649263977286452, abs=1e-9)


def test_tile_to_feature():
    feature = tile_to_feature(556236300)
    assert feature["type"] == "Feature"
    assert feature["geometry"]["type"] == "Polygon"
    assert len(feature["geometry"]["coordinates"][0]) == 5
    assert feature["properties"]["tile_id"] == 556236300
    assert feature["properties"]["level"] == 13
    assert feature["properties"]["center"] == [111.851806640625, 30.640869140625]


def test_tiles_to_feature_collection():
    collection = tiles_to_feature_collection([556236300, 556236301])
    assert collection["type"] == "FeatureCollection"
    assert [f["properties"]["tile_id"] for f in collection["features"]] == [556236300, 556236301]
