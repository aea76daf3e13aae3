#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
図幅番号（tile id）の計算をまとめたモジュールです。

図幅番号はモートン符号の上位ビットをレベルに応じて切り出し、
レベルを表すビットを (16 + level) の位置に立てた整数です。

    tile id = (morton >> (62 - 2 * level)) | (1 << (16 + level))

そのためレベルは図幅番号のビット長から 17 を引けば求まります。
レベル L の図幅の一辺は 2^(31 - L) NDS単位です。

座標はすべて (x, y) = (経度, 緯度) の順で扱います。
境界は (left, bottom, right, top) です。
"""

#
# 標準ライブラリのインポート
#
import logging

from typing import Tuple

#
# 独自モジュールのインポート
#
from morton import compress_bits, interleave, to_int32
from nds import deg2nds, nds2deg
from gcj02 import wgs84_to_gcj02

logger = logging.getLogger(__name__)

# レベルビットより下に置かれるビット数
MIN_TILE_BITS: int = 17

# 扱えるレベルの上限
# レベルビット (16 + L) が詰めたモートン符号 (2L + 1 ビット) より上にある必要がある
MAX_LEVEL: int = 15

# 座標系の指定
SYSTEM_WGS84: str = "84"
SYSTEM_GCJ02: str = "02"


class InvalidTileError(ValueError):
    """ 図幅番号として解釈できない値 """


class InvalidLevelError(ValueError):
    """ 範囲外のレベル """


def check_level(level: int) -> int:
    if not 0 <= level <= MAX_LEVEL:
        raise InvalidLevelError(f"level must be in 0..{MAX_LEVEL}: {level}")
    return level


def get_tile_level(tileid: int) -> int:
    """ 図幅番号のビット長からレベルを求める """
    if tileid <= 0:
        raise InvalidTileError(f"tile id must be positive: {tileid}")
    level = tileid.bit_length() - MIN_TILE_BITS
    if not 0 <= level <= MAX_LEVEL:
        raise InvalidTileError(f"tile id has no valid level bit: {tileid}")
    return level


def get_tile_width(tileid: int) -> int:
    """ 図幅の一辺の長さ（NDS単位） """
    return 1 << (31 - get_tile_level(tileid))


#
# モートン符号
#

def nds2morton(nds_x: int, nds_y: int) -> int:
    """ NDS座標（分）をモートン符号に変換 """
    return interleave(nds_x, nds_y)


def deg2morton(lon: float, lat: float) -> int:
    """ 経度緯度（度）をモートン符号に変換 """
    return interleave(deg2nds(lon), deg2nds(lat))


def morton2nds(morton_code: int) -> Tuple[int, int]:
    """
    モートン符号からNDS座標（分）を取り出す。

    yは31ビットで格納されているので、bit30が立っていれば負の値として復元する。
    """
    x = compress_bits(morton_code)
    y = compress_bits(morton_code >> 1)
    if y & 0x40000000:
        y |= 0x80000000
    return to_int32(x), to_int32(y)


def morton2tileid(morton_code: int, level: int) -> int:
    """ モートン符号をレベルの精度に切り詰めて図幅番号にする """
    check_level(level)
    packed_tile_id = morton_code >> (62 - 2 * level)
    packed_level = 1 << (16 + level)
    return packed_tile_id | packed_level


def tileid2morton(tileid: int) -> int:
    """ 図幅番号をモートン符号（図幅の左下）に戻す """
    level = get_tile_level(tileid)
    morton_code_tile = tileid & ((1 << (2 * level + 1)) - 1)
    return morton_code_tile << (62 - 2 * level)


#
# 図幅番号と座標
#

def nds2tileid(nds_x: int, nds_y: int, level: int) -> int:
    return morton2tileid(nds2morton(nds_x, nds_y), level)


def deg2tileid(lon: float, lat: float, level: int) -> int:
    return nds2tileid(deg2nds(lon), deg2nds(lat), level)


def tileid2nds(tileid: int) -> Tuple[int, int]:
    """ 図幅の左下のNDS座標（分） """
    return morton2nds(tileid2morton(tileid))


def tileid2deg(tileid: int) -> Tuple[float, float]:
    """ 図幅の左下の経度緯度（度） """
    nds_x, nds_y = tileid2nds(tileid)
    return nds2deg(nds_x), nds2deg(nds_y)


def get_nds_border_by_tileid(tileid: int) -> Tuple[int, int, int, int]:
    """ 図幅の境界 (left, bottom, right, top)（分） """
    x, y = tileid2nds(tileid)
    tile_width = get_tile_width(tileid)
    return x, y, x + tile_width, y + tile_width


def get_deg_border_by_tileid(tileid: int) -> Tuple[float, float, float, float]:
    """ 図幅の境界 (left, bottom, right, top)（度） """
    left, bottom, right, top = get_nds_border_by_tileid(tileid)
    return nds2deg(left), nds2deg(bottom), nds2deg(right), nds2deg(top)


def get_center_nds_by_tileid(tileid: int) -> Tuple[int, int]:
    """ 図幅の中心（分） """
    left, bottom, right, top = get_nds_border_by_tileid(tileid)
    return left + (right - left) // 2, bottom + (top - bottom) // 2


def get_center_deg_by_tileid(tileid: int, system: str = SYSTEM_WGS84) -> Tuple[float, float]:
    """
    図幅の中心（度）

    Args:
        tileid: 図幅番号
        system: "84" ならWGS-84、"02" ならGCJ-02で返す
    """
    if system not in (SYSTEM_WGS84, SYSTEM_GCJ02):
        raise ValueError(f"unknown coordinate system: {system}")
    nds_x, nds_y = get_center_nds_by_tileid(tileid)
    lon, lat = nds2deg(nds_x), nds2deg(nds_y)
    if system == SYSTEM_GCJ02:
        return wgs84_to_gcj02(lon, lat)
    return lon, lat


def tileid_transform(tileid: int, to_level: int) -> int:
    """
    図幅番号を別のレベルの図幅番号に変換する。

    左下の座標を度に戻してから再計算するので、ビット演算だけの変換ではない。
    """
    lon, lat = tileid2deg(tileid)
    new_tileid = deg2tileid(lon, lat, to_level)
    logger.debug(f"tileid_transform: {tileid} -> {new_tileid} (level {get_tile_level(tileid)} -> {to_level})")
    return new_tileid
