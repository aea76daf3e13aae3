#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ポリゴンと交差する図幅の図幅番号を列挙するモジュールです。

1. ポリゴンの外接矩形を求める
2. 外接矩形の左下と右上をそれぞれ図幅番号に変換する
3. その間の図幅番号を順番に調べ、図幅のジオメトリとポリゴンが交差するものを残す

モートン符号は x, y それぞれについて単調なので、符号が同じ範囲であれば
外接矩形に含まれる図幅は左下と右上の図幅番号の間に収まる。
負の座標は2の補数で格納されるため、外接矩形が経度0度や赤道をまたぐ場合は
符号ごとに矩形を分けて範囲を求める。

ジオメトリの処理（WKTの読み込み、外接矩形、交差判定）は shapely に任せる。
"""

#
# 標準ライブラリのインポート
#
import logging

from typing import Any, List, Optional, Tuple

#
# 外部ライブラリのインポート
#
import shapely
import shapely.wkt

from shapely.errors import ShapelyError
from shapely.geometry.base import BaseGeometry

#
# 独自モジュールのインポート
#
from nds import deg2nds
from tileid import check_level, nds2tileid
from tile_geometry import tile_to_geometry

logger = logging.getLogger(__name__)

# 一度に調べる図幅番号の上限
MAX_CANDIDATES: int = 1_000_000


class WktParseError(ValueError):
    """ WKTがポリゴンとして読めない """


class GeometryQueryError(RuntimeError):
    """ 外接矩形や交差判定が計算できない """


class TooManyCandidatesError(RuntimeError):
    """ 調べる図幅番号の数が上限を超えた """

    def __init__(self, count: int, limit: int):
        super().__init__(f"too many candidate tiles: {count} > {limit}")
        self.count = count
        self.limit = limit


class ShapelyGeometry:
    """ shapelyを使ったジオメトリ処理 """

    def parse(self, wkt_text: str) -> BaseGeometry:
        try:
            geom = shapely.wkt.loads(wkt_text)
        except (ShapelyError, ValueError, TypeError) as e:
            raise WktParseError(f"invalid WKT: {wkt_text!r}") from e
        if geom.geom_type != 'Polygon':
            raise WktParseError(f"WKT is not a polygon: {geom.geom_type}")
        return geom

    def bounding_rect(self, geom: BaseGeometry) -> Tuple[float, float, float, float]:
        """ (minx, miny, maxx, maxy) """
        if geom.is_empty:
            raise GeometryQueryError("bounding rectangle of an empty geometry")
        return geom.bounds

    def intersects(self, a: BaseGeometry, b: BaseGeometry) -> bool:
        # 同じポリゴンで何度も判定するので準備しておく（二度目以降は何もしない）
        shapely.prepare(a)
        try:
            return bool(a.intersects(b))
        except ShapelyError as e:
            raise GeometryQueryError(f"intersection test failed: {e}") from e


def _split_by_sign(lo: int, hi: int) -> List[Tuple[int, int]]:
    """ 0をまたぐ範囲を負の側と正の側に分ける """
    if lo < 0 <= hi:
        return [(lo, -1), (0, hi)]
    return [(lo, hi)]


def candidate_ranges(bounds: Tuple[float, float, float, float], level: int) -> List[Tuple[int, int]]:
    """
    外接矩形（度）に含まれうる図幅番号の範囲のリストを返す。

    Returns:
        [(min_tile, max_tile), ...] 両端を含む
    """
    min_x, min_y, max_x, max_y = bounds
    nds_min_x, nds_min_y = deg2nds(min_x), deg2nds(min_y)
    nds_max_x, nds_max_y = deg2nds(max_x), deg2nds(max_y)

    ranges = []
    for x_lo, x_hi in _split_by_sign(nds_min_x, nds_max_x):
        for y_lo, y_hi in _split_by_sign(nds_min_y, nds_max_y):
            min_tile = nds2tileid(x_lo, y_lo, level)
            max_tile = nds2tileid(x_hi, y_hi, level)
            ranges.append((min_tile, max_tile))
    return ranges


def polygon_to_tiles(polygon: str,
                     level: int,
                     geometry: Optional[Any] = None,
                     max_candidates: Optional[int] = MAX_CANDIDATES) -> List[int]:
    """
    ポリゴンと交差する図幅の図幅番号を昇順で返す。

    Args:
        polygon: WKTのポリゴン
        level: 図幅のレベル
        geometry: parse(), bounding_rect(), intersects() を持つオブジェクト。省略時はShapelyGeometry
        max_candidates: 調べる図幅番号の上限。Noneなら制限しない

    Raises:
        WktParseError: WKTが読めない
        GeometryQueryError: 外接矩形や交差判定が計算できない
        TooManyCandidatesError: 候補の数がmax_candidatesを超えた
    """
    check_level(level)
    if geometry is None:
        geometry = ShapelyGeometry()

    g = geometry.parse(polygon)
    bounds = geometry.bounding_rect(g)
    ranges = candidate_ranges(bounds, level)

    count = sum(max_tile - min_tile + 1 for min_tile, max_tile in ranges)
    if max_candidates is not None and count > max_candidates:
        raise TooManyCandidatesError(count, max_candidates)

    checked_tiles = set()
    for min_tile, max_tile in ranges:
        for tileid in range(min_tile, max_tile + 1):
            if tileid in checked_tiles:
                continue
            tile_polygon = geometry.parse(tile_to_geometry(tileid, 2))
            if geometry.intersects(g, tile_polygon):
                checked_tiles.add(tileid)

    logger.info(f"polygon_to_tiles: level={level}, candidates={count}, tiles={len(checked_tiles)}")
    return sorted(checked_tiles)
