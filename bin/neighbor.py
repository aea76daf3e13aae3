#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
隣接する図幅の図幅番号を求めるモジュールです。

    LEFT_UP   | UP   | RIGHT_UP
    ----------+------+-----------
    LEFT      | self | RIGHT
    ----------+------+-----------
    LEFT_DOWN | DOWN | RIGHT_DOWN
"""

#
# 標準ライブラリのインポート
#
import logging

from enum import Enum
from typing import List, Optional, Union

#
# 独自モジュールのインポート
#
from tileid import get_center_nds_by_tileid, get_tile_level, get_tile_width, nds2tileid

logger = logging.getLogger(__name__)


class Direction(Enum):
    """ 方位と (x, y) 方向の移動量（図幅の幅を単位とする） """

    UP = (0, 1)
    DOWN = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)
    LEFT_UP = (-1, 1)
    RIGHT_UP = (1, 1)
    LEFT_DOWN = (-1, -1)
    RIGHT_DOWN = (1, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    def opposite(self) -> 'Direction':
        return Direction((-self.dx, -self.dy))


# get_all_neighbor_tiles() が返す順番（先頭は自分自身）
NEIGHBOR_ORDER: List[Direction] = [
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
    Direction.LEFT_UP,
    Direction.RIGHT_UP,
    Direction.LEFT_DOWN,
    Direction.RIGHT_DOWN,
]


def parse_direction(direction: Union[Direction, str]) -> Optional[Direction]:
    """ Directionもしくはその名前を受け取り、知らない名前ならNoneを返す """
    if isinstance(direction, Direction):
        return direction
    try:
        return Direction[str(direction).upper()]
    except KeyError:
        return None


def get_neighbor_tileid(tileid: int, direction: Union[Direction, str]) -> int:
    """
    指定した方位に隣接する同じレベルの図幅番号を返す。

    図幅の中心を図幅の幅だけずらし、その点を含む図幅を求める。
    方位の名前が不明な場合は中心を動かさないので、元の図幅番号がそのまま返る。
    """
    level = get_tile_level(tileid)
    tile_width = get_tile_width(tileid)
    center_x, center_y = get_center_nds_by_tileid(tileid)

    d = parse_direction(direction)
    if d is None:
        logger.debug(f"unknown direction {direction!r}, tile {tileid} is returned as is")
    else:
        center_x += d.dx * tile_width
        center_y += d.dy * tile_width

    return nds2tileid(center_x, center_y, level)


def get_all_neighbor_tiles(tileid: int) -> List[int]:
    """ 自分自身と8方向の隣接図幅の図幅番号を返す """
    neighbor_tiles = [tileid]
    for d in NEIGHBOR_ORDER:
        neighbor_tiles.append(get_neighbor_tileid(tileid, d))
    return neighbor_tiles
