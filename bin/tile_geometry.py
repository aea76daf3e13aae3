#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
図幅の境界をジオメトリとして出力するモジュールです。

図幅の四隅はGCJ-02に変換してから出力します（中国の地図サービスに重ねて表示するため）。
四隅は 左下 -> 左上 -> 右上 -> 右下 -> 左下 の順に並べて閉じたリングにします。
"""

#
# 標準ライブラリのインポート
#
import logging

from typing import Any, Dict, Iterable, List, Tuple

#
# 外部ライブラリのインポート
#
import numpy as np

from shapely.geometry import Polygon, mapping

#
# 独自モジュールのインポート
#
from gcj02 import wgs84_to_gcj02
from tileid import get_center_deg_by_tileid, get_deg_border_by_tileid, get_tile_level

logger = logging.getLogger(__name__)

# 3次元で出力するときのz値
GEOMETRY_Z: int = -1000000


def format_number(value: float) -> str:
    """ 浮動小数点を指数表記なし、末尾の .0 なしの最短表記にする """
    return np.format_float_positional(value, unique=True, trim='-')


def get_tile_corners(tileid: int) -> List[Tuple[float, float]]:
    """ 図幅の四隅（GCJ-02）を閉じたリングとして返す """
    left, bottom, right, top = get_deg_border_by_tileid(tileid)
    left_bottom = wgs84_to_gcj02(left, bottom)
    left_top = wgs84_to_gcj02(left, top)
    right_top = wgs84_to_gcj02(right, top)
    right_bottom = wgs84_to_gcj02(right, bottom)
    return [left_bottom, left_top, right_top, right_bottom, left_bottom]


def tile_to_geometry(tileid: int, dimension: int = 3) -> str:
    """
    図幅の境界をWKTで返す。

    Args:
        tileid: 図幅番号
        dimension: 2 なら POLYGON、それ以外は z=-1000000 を付けた POLYGON Z

    Returns:
        WKT文字列
    """
    corners = get_tile_corners(tileid)
    if dimension == 2:
        points = [f"{format_number(x)} {format_number(y)}" for x, y in corners]
        return f"POLYGON (({', '.join(points)}))"

    points = [f"{format_number(x)} {format_number(y)} {GEOMETRY_Z}" for x, y in corners]
    return f"POLYGON Z (({', '.join(points)}))"


def tile_to_polygon(tileid: int) -> Polygon:
    """ 図幅の境界をshapelyのPolygonで返す """
    return Polygon(get_tile_corners(tileid))


def tile_to_feature(tileid: int) -> Dict[str, Any]:
    """ 図幅をGeoJSONのFeatureにする """
    lon, lat = get_center_deg_by_tileid(tileid)
    return {
        "type": "Feature",
        "geometry": mapping(tile_to_polygon(tileid)),
        "properties": {
            "tile_id": tileid,
            "level": get_tile_level(tileid),
            "center": [lon, lat],
        }
    }


def tiles_to_feature_collection(tileids: Iterable[int]) -> Dict[str, Any]:
    """ 図幅のリストをGeoJSONのFeatureCollectionにする """
    features = [tile_to_feature(tileid) for tileid in tileids]
    logger.debug(f"tiles_to_feature_collection: {len(features)} features")
    return {
        "type": "FeatureCollection",
        "features": features
    }
