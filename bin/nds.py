#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
度とNDS座標（分）の相互変換です。

NDS座標は90度を2^30に対応させた固定小数点の整数座標です。
1単位はおよそ 90 / 2^30 = 8.4e-8 度です。
"""

# 90度あたりのNDS単位
NDS_SCALE: float = float(1 << 30)

# NDS座標1単位あたりの度
NDS_UNIT_DEG: float = 90.0 / NDS_SCALE

# 度で受け付ける範囲
MIN_DEG: float = -180.0
MAX_DEG: float = 180.0


class DomainError(ValueError):
    """ 度の値が変換可能な範囲外 """

    def __init__(self, value: float):
        super().__init__(f"degree value out of range [{MIN_DEG}, {MAX_DEG}]: {value}")
        self.value = value


def deg2nds(deg: float) -> int:
    """
    度をNDS座標（分）に変換する。

    小数点以下はゼロ方向に切り捨てる。

    Raises:
        DomainError: degが[-180, 180]の範囲外（NaNを含む）
    """
    if not MIN_DEG <= deg <= MAX_DEG:
        raise DomainError(deg)
    return int(NDS_SCALE * deg / 90.0)


def nds2deg(nds: int) -> float:
    """ NDS座標（分）を度に変換する。範囲チェックはしない """
    return 90.0 * float(nds) / NDS_SCALE
