#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
WGS-84 から GCJ-02（中国の地図サービスで使われる測地系）への変換です。

GCJ-02 は WGS-84 に経験式でずれを加えたもので、逆変換の厳密解はありません。
式の定数と項の順番を変えると浮動小数点の結果が一致しなくなるので注意。
"""

#
# 標準ライブラリのインポート
#
import math

from typing import Tuple

# クラソフスキー楕円体の長半径
SEMI_MAJOR_AXIS: float = 6378245.0

# 離心率の二乗
EE: float = 0.00669342162296594323


def _delta_lat(lng2: float, lat2: float) -> float:
    pi = math.pi
    return (-100.0
            + 2.0 * lng2
            + 3.0 * lat2
            + 0.2 * lat2 * lat2
            + 0.1 * lng2 * lat2
            + 0.2 * math.sqrt(abs(lng2))
            + (20.0 * math.sin(6.0 * lng2 * pi) + 20.0 * math.sin(2.0 * lng2 * pi)) * 2.0 / 3.0
            + (20.0 * math.sin(lat2 * pi) + 40.0 * math.sin(lat2 / 3.0 * pi)) * 2.0 / 3.0
            + (160.0 * math.sin(lat2 / 12.0 * pi) + 320.0 * math.sin(lat2 * pi / 30.0)) * 2.0 / 3.0)


def _delta_lng(lng2: float, lat2: float) -> float:
    pi = math.pi
    return (300.0
            + lng2
            + 2.0 * lat2
            + 0.1 * lng2 * lng2
            + 0.1 * lng2 * lat2
            + 0.1 * math.sqrt(abs(lng2))
            + (20.0 * math.sin(6.0 * lng2 * pi) + 20.0 * math.sin(2.0 * lng2 * pi)) * 2.0 / 3.0
            + (20.0 * math.sin(lng2 * pi) + 40.0 * math.sin(lng2 / 3.0 * pi)) * 2.0 / 3.0
            + (150.0 * math.sin(lng2 / 12.0 * pi) + 300.0 * math.sin(lng2 / 30.0 * pi)) * 2.0 / 3.0)


def wgs84_to_gcj02(lng: float, lat: float) -> Tuple[float, float]:
    """
    WGS-84の経度緯度をGCJ-02に変換する。

    Returns:
        (lng, lat) GCJ-02の経度緯度
    """
    # 基準点 (105, 35) からの差分で補正量を求める
    lng2 = lng - 105.0
    lat2 = lat - 35.0
    dlat = _delta_lat(lng2, lat2)
    dlng = _delta_lng(lng2, lat2)

    # 緯度に応じた楕円体の曲率で度に換算する
    radlat = lat / 180.0 * math.pi
    magic = math.sin(radlat)
    magic = 1.0 - EE * magic * magic
    sqrtmagic = math.sqrt(magic)
    dlat = (dlat * 180.0) / ((SEMI_MAJOR_AXIS * (1.0 - EE)) / (magic * sqrtmagic) * math.pi)
    dlng = (dlng * 180.0) / (SEMI_MAJOR_AXIS / sqrtmagic * math.cos(radlat) * math.pi)

    return lng + dlng, lat + dlat
