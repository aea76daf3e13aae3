#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
NDS図幅番号を計算するコマンドラインツールです。

使用例:
  nds_tile.py encode --lon 111.8408203125 --lat 30.6298828125 --level 13
  nds_tile.py info 556236300
  nds_tile.py neighbors 556236300
  nds_tile.py geometry 556236300 --dimension 2
  nds_tile.py polygon --wkt "POLYGON ((...))" --level 13 --geojson tiles.geojson
  nds_tile.py csv --input points.csv --output points_tile.csv --level 13
"""

# スクリプトを引数無しで実行したときのヘルプに使うデスクリプション
SCRIPT_DESCRIPTION = 'NDS tile id calculator'

#
# 標準ライブラリのインポート
#
import argparse
import json
import logging
import sys

from pathlib import Path
from typing import List, Optional, Tuple

# WSL1 固有の numpy 警告を抑制
# https://github.com/numpy/numpy/issues/18900
import warnings
warnings.filterwarnings(action="ignore", category=UserWarning, module=r"numpy.*", message=r"Signature b")

#
# 外部ライブラリのインポート
#
try:
    import pandas as pd
    import matplotlib.pyplot as plt

    # GPS座標から距離を計算
    from geopy.distance import distance

    # データを整形して表示
    from tabulate import tabulate

except ImportError as e:
    logging.error(f"必要なライブラリがインストールされていません: {e}")
    sys.exit(1)

#
# 独自モジュールのインポート
#
from nds import DomainError
from tileid import (
    InvalidLevelError, InvalidTileError, SYSTEM_GCJ02, SYSTEM_WGS84,
    deg2tileid, get_center_deg_by_tileid, get_deg_border_by_tileid,
    get_nds_border_by_tileid, get_tile_level, get_tile_width,
)
from neighbor import NEIGHBOR_ORDER, get_all_neighbor_tiles
from tile_geometry import get_tile_corners, tile_to_geometry, tiles_to_feature_collection
from polygon_tiles import (
    GeometryQueryError, MAX_CANDIDATES, TooManyCandidatesError, WktParseError,
    polygon_to_tiles,
)

# レベルを省略したときの値
DEFAULT_LEVEL: int = 13

# このファイルの名前から拡張子を除いてプログラム名を得る
app_name = Path(__file__).stem

#
# ログ設定
#

# ロガーを取得
logger = logging.getLogger(app_name)

# ルートロガーへの伝播を無効化
logger.propagate = False

# フォーマット
formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')


def setup_logging(level: int = logging.INFO, log_dir: Optional[Path] = None) -> None:
    """
    標準出力と（log_dirが指定されていれば）ログファイルにハンドラを付ける

    ライブラリ側のモジュールのログも同じハンドラに出す
    """
    handlers: List[logging.Handler] = []

    # 標準出力へのハンドラ
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.setLevel(level)
    handlers.append(stdout_handler)

    # ログファイルのハンドラ
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir.joinpath(app_name + '.log'), 'a+', encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    for name in (app_name, 'tileid', 'neighbor', 'tile_geometry', 'polygon_tiles'):
        lib_logger = logging.getLogger(name)
        lib_logger.setLevel(level)
        for handler in list(lib_logger.handlers):
            lib_logger.removeHandler(handler)
        for handler in handlers:
            lib_logger.addHandler(handler)
        lib_logger.propagate = False

#
# ここからスクリプト
#

def tile_size_meters(tileid: int) -> Tuple[float, float]:
    """ 図幅の東西、南北の長さ（メートル）を図幅の中央で測る """
    left, bottom, right, top = get_deg_border_by_tileid(tileid)
    mid_lat = (bottom + top) / 2
    mid_lon = (left + right) / 2
    width_m = distance((mid_lat, left), (mid_lat, right)).meters
    height_m = distance((bottom, mid_lon), (top, mid_lon)).meters
    return width_m, height_m


def add_tile_id_column(df: pd.DataFrame, level: int) -> pd.DataFrame:
    """ lat, lon列から図幅番号を計算してtile_id列を追加する """
    df = df.copy()
    df["tile_id"] = [deg2tileid(lon, lat, level) for lat, lon in zip(df["lat"], df["lon"])]
    return df


def load_points_csv(input_path: Path) -> pd.DataFrame:
    """
    列名のないCSVファイルを読み込む。先頭の2列を lat, lon とする
    """
    df = pd.read_csv(input_path, header=None)
    if df.shape[1] < 2:
        raise ValueError(f"CSV needs lat and lon columns: {input_path}")
    columns = ["lat", "lon"] + [f"col{i}" for i in range(2, df.shape[1])]
    df.columns = columns
    return df


def save_tiles_image(polygon_wkt: str, tileids: List[int], output_path: Path) -> None:
    """ ポリゴンと交差した図幅を描画して保存する """
    from shapely import wkt as shapely_wkt

    fig, ax = plt.subplots(figsize=(10, 8))

    for tileid in tileids:
        xs, ys = zip(*get_tile_corners(tileid))
        ax.fill(xs, ys, facecolor='skyblue', edgecolor='blue', alpha=0.3)
        cx, cy = get_center_deg_by_tileid(tileid, SYSTEM_GCJ02)
        ax.text(cx, cy, str(tileid), fontsize=6, ha='center', va='center')

    polygon = shapely_wkt.loads(polygon_wkt)
    xs, ys = polygon.exterior.xy
    ax.plot(xs, ys, color='red', linewidth=1.5)

    ax.set_title(f"Tiles intersecting polygon ({len(tileids)} tiles)")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.grid(True, linestyle='--', alpha=0.5)
    ax.set_aspect('equal', adjustable='box')

    plt.tight_layout()
    plt.savefig(output_path)
    plt.close(fig)
    logger.info(f"画像を保存しました: {output_path}")


def cmd_encode(args: argparse.Namespace) -> int:
    tileid = deg2tileid(args.lon, args.lat, args.level)
    print(tileid)
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    tileid = args.tileid
    left, bottom, right, top = get_deg_border_by_tileid(tileid)
    width_m, height_m = tile_size_meters(tileid)
    table = [
        ["tile_id", tileid],
        ["level", get_tile_level(tileid)],
        ["width (nds)", get_tile_width(tileid)],
        ["border (nds)", get_nds_border_by_tileid(tileid)],
        ["border (deg)", (left, bottom, right, top)],
        ["center WGS-84", get_center_deg_by_tileid(tileid, SYSTEM_WGS84)],
        ["center GCJ-02", get_center_deg_by_tileid(tileid, SYSTEM_GCJ02)],
        ["size (m)", f"{width_m:.1f} x {height_m:.1f}"],
    ]
    print(tabulate(table, headers=["", "value"], disable_numparse=True))
    return 0


def cmd_neighbors(args: argparse.Namespace) -> int:
    tiles = get_all_neighbor_tiles(args.tileid)
    names = ["SELF"] + [d.name for d in NEIGHBOR_ORDER]
    print(tabulate(list(zip(names, tiles)), headers=["direction", "tile_id"]))
    return 0


def cmd_geometry(args: argparse.Namespace) -> int:
    print(tile_to_geometry(args.tileid, args.dimension))
    return 0


def cmd_polygon(args: argparse.Namespace) -> int:
    if args.wkt_file:
        polygon_wkt = Path(args.wkt_file).read_text(encoding='utf-8').strip()
    else:
        polygon_wkt = args.wkt

    max_candidates = args.max_candidates if args.max_candidates > 0 else None
    tiles = polygon_to_tiles(polygon_wkt, args.level, max_candidates=max_candidates)
    for tileid in tiles:
        print(tileid)

    if args.geojson:
        geojson = tiles_to_feature_collection(tiles)
        with open(args.geojson, 'w', encoding='utf-8') as f:
            json.dump(geojson, f, ensure_ascii=False, indent=2)
        logger.info(f"GeoJSONを保存しました: {args.geojson}")

    if args.image:
        save_tiles_image(polygon_wkt, tiles, Path(args.image))

    return 0


def cmd_csv(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"入力ファイルが存在しません: {input_path}")
        return 1

    df = load_points_csv(input_path)
    df = add_tile_id_column(df, args.level)
    logger.info(f"head(3)\n{df.head(3).to_markdown()}\n")

    df.to_csv(args.output, index=False, header=False)
    logger.info(f"図幅番号を追加したCSVファイルを保存しました: {args.output} ({len(df)}件)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=SCRIPT_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--debug', action='store_true', help='DEBUGレベルのログを出力する')
    parser.add_argument('--log-dir', type=str, default='log', help='ログファイルを置くディレクトリ（デフォルト: log）')
    parser.add_argument('--no-log-file', action='store_true', help='ログファイルに出力しない')

    subparsers = parser.add_subparsers(dest='command')

    p = subparsers.add_parser('encode', help='経度緯度から図幅番号を求める')
    p.add_argument('--lon', type=float, required=True, help='経度（度）')
    p.add_argument('--lat', type=float, required=True, help='緯度（度）')
    p.add_argument('--level', type=int, default=DEFAULT_LEVEL, help=f'レベル（デフォルト: {DEFAULT_LEVEL}）')
    p.set_defaults(func=cmd_encode)

    p = subparsers.add_parser('info', help='図幅の情報を表示する')
    p.add_argument('tileid', type=int, help='図幅番号')
    p.set_defaults(func=cmd_info)

    p = subparsers.add_parser('neighbors', help='隣接する図幅を表示する')
    p.add_argument('tileid', type=int, help='図幅番号')
    p.set_defaults(func=cmd_neighbors)

    p = subparsers.add_parser('geometry', help='図幅の境界をWKTで表示する')
    p.add_argument('tileid', type=int, help='図幅番号')
    p.add_argument('--dimension', type=int, default=3, choices=[2, 3], help='次元（デフォルト: 3）')
    p.set_defaults(func=cmd_geometry)

    p = subparsers.add_parser('polygon', help='ポリゴンと交差する図幅を列挙する')
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument('--wkt', type=str, help='WKTのポリゴン')
    source.add_argument('--wkt-file', type=str, help='WKTのポリゴンを書いたファイル')
    p.add_argument('--level', type=int, default=DEFAULT_LEVEL, help=f'レベル（デフォルト: {DEFAULT_LEVEL}）')
    p.add_argument('--max-candidates', type=int, default=MAX_CANDIDATES, help=f'調べる図幅番号の上限、0で無制限（デフォルト: {MAX_CANDIDATES}）')
    p.add_argument('--geojson', type=str, help='結果を保存するGeoJSONファイル')
    p.add_argument('--image', type=str, help='結果を描画する画像ファイル')
    p.set_defaults(func=cmd_polygon)

    p = subparsers.add_parser('csv', help='CSVファイルの各点に図幅番号を付ける')
    p.add_argument('--input', type=str, required=True, help='入力CSVファイル（lat, lon, ...）')
    p.add_argument('--output', type=str, required=True, help='出力CSVファイル')
    p.add_argument('--level', type=int, default=DEFAULT_LEVEL, help=f'レベル（デフォルト: {DEFAULT_LEVEL}）')
    p.set_defaults(func=cmd_csv)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """メイン関数
    Returns:
    int -- 正常終了は0、異常時はそれ以外を返却
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # サブコマンドが指定されていない場合はhelpを表示して終了
    if not args.command:
        parser.print_help()
        return 0

    log_dir = None if args.no_log_file else Path(args.log_dir)
    setup_logging(logging.DEBUG if args.debug else logging.INFO, log_dir)

    try:
        return args.func(args)
    except (DomainError, InvalidTileError, InvalidLevelError,
            WktParseError, GeometryQueryError, TooManyCandidatesError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("処理がユーザーにより中断されました")
        return 0
    except Exception as e:
        logger.exception(f"予期せぬエラーが発生しました: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
