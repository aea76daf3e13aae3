#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
モートン符号（Z-order曲線）のビット操作をまとめたモジュールです。

64ビットのモートン符号は、x座標を偶数ビット、y座標を奇数ビットに交互に並べたものです。

    bit:  ... 5  4  3  2  1  0
          ... y2 x2 y1 x1 y0 x0

compress_bits() は偶数ビットだけを取り出して下位32ビットに詰め、
expand_bits() はその逆に下位32ビットを偶数ビットへ広げます。
"""

# 偶数ビットを取り出すマスク
MASK_EVEN_BITS = 0x5555555555555555

# 32ビットのマスク
MASK_32 = 0xFFFFFFFF


def compress_bits(v: int) -> int:
    """ 偶数ビットを取り出して下位32ビットに詰める """
    v &= MASK_EVEN_BITS
    v = (v ^ (v >> 1)) & 0x3333333333333333
    v = (v ^ (v >> 2)) & 0x0F0F0F0F0F0F0F0F
    v = (v ^ (v >> 4)) & 0x00FF00FF00FF00FF
    v = (v ^ (v >> 8)) & 0x0000FFFF0000FFFF
    v = (v ^ (v >> 16)) & 0x00000000FFFFFFFF
    return v


def expand_bits(v: int) -> int:
    """ 下位32ビットを偶数ビットに広げる """

    # 負の値は符号拡張された上位ビットが残るので、先に32ビットに切り詰める
    v &= MASK_32

    v = (v | (v << 16)) & 0x0000FFFF0000FFFF
    v = (v | (v << 8)) & 0x00FF00FF00FF00FF
    v = (v | (v << 4)) & 0x0F0F0F0F0F0F0F0F
    v = (v | (v << 2)) & 0x3333333333333333
    v = (v | (v << 1)) & MASK_EVEN_BITS
    return v


def interleave(x: int, y: int) -> int:
    """ x, yを交互に並べたモートン符号を返す（yは31ビットに切り詰める） """
    return expand_bits(x) | (expand_bits(y & 0x7FFFFFFF) << 1)


def to_int32(v: int) -> int:
    """ 32ビットの2の補数表現を符号付き整数として読む """
    v &= MASK_32
    if v & 0x80000000:
        return v - (1 << 32)
    return v
