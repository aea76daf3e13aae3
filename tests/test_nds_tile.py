# tests/test_nds_tile.py
# テストコード for nds_tile.py
# pytestを使用

import sys
import os
import json

BIN_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../bin'))
if BIN_DIR not in sys.path:
    sys.path.insert(0, BIN_DIR)

import pandas as pd

from nds_tile import add_tile_id_column, main, tile_size_meters

TILE_POLYGON = (
    "POLYGON ((111.84648227716731 30.62728190721755, 111.84648417243615 30.649263977286452, "
    "111.86841269240549 30.649227710764272, 111.86841080660852 30.62724564013721, "
    "111.84648227716731 30.62728190721755))"
)


def test_encode(capsys):
    assert main(['--no-log-file', 'encode', '--lon', '111.8408203125', '--lat', '30.6298828125', '--level', '13']) == 0
    assert capsys.readouterr().out.strip() == "556236300"


def test_encode_out_of_range(capsys):
    assert main(['--no-log-file', 'encode', '--lon', '200', '--lat', '0']) == 1
    assert "DomainError" in capsys.readouterr().out


def test_invalid_tileid(capsys):
    assert main(['--no-log-file', 'info', '0']) == 1
    assert "InvalidTileError" in capsys.readouterr().out


def test_info(capsys):
    assert main(['--no-log-file', 'info', '556236300']) == 0
    out = capsys.readouterr().out
    assert "262144" in out
    assert "111.8408203125" in out


def test_neighbors(capsys):
    assert main(['--no-log-file', 'neighbors', '556236300']) == 0
    out = capsys.readouterr().out
    assert "LEFT_DOWN" in out
    assert "556236291" in out


def test_geometry(capsys):
    assert main(['--no-log-file', 'geometry', '556236300', '--dimension', '2']) == 0
    assert capsys.readouterr().out.startswith("POLYGON ((")


def test_polygon_geojson(tmp_path, capsys):
    output = tmp_path / "tiles.geojson"
    assert main(['--no-log-file', 'polygon', '--wkt', TILE_POLYGON, '--level', '13', '--geojson', str(output)]) == 0
    geojson = json.loads(output.read_text(encoding='utf-8'))
    assert [f["properties"]["tile_id"] for f in geojson["features"]] == [
        556236294, 556236295, 556236297, 556236299, 556236300, 556236301
    ]


def test_polygon_too_many_candidates(capsys):
    polygon = "POLYGON ((100 20, 120 20, 120 40, 100 40, 100 20))"
    assert main(['--no-log-file', 'polygon', '--wkt', polygon, '--max-candidates', '10']) == 1
    assert "TooManyCandidatesError" in capsys.readouterr().out


def test_polygon_wkt_file(tmp_path, capsys):
    wkt_file = tmp_path / "polygon.wkt"
    wkt_file.write_text(TILE_POLYGON + "\n", encoding='utf-8')
    assert main(['--no-log-file', 'polygon', '--wkt-file', str(wkt_file)]) == 0
    assert "556236300" in capsys.readouterr().out


def test_csv(tmp_path):
    input_path = tmp_path / "points.csv"
    output_path = tmp_path / "points_tile.csv"
    input_path.write_text("30.6298828125,111.8408203125,5.0\n30.64,111.87,7.5\n", encoding='utf-8')
    assert main(['--no-log-file', 'csv', '--input', str(input_path), '--output', str(output_path), '--level', '13']) == 0
    lines = output_path.read_text(encoding='utf-8').splitlines()
    assert len(lines) == 2
    assert lines[0].split(',')[-1] == "556236300"
    assert lines[1].split(',')[-1] == "556236301"


def test_csv_missing_input(tmp_path):
    assert main(['--no-log-file', 'csv', '--input', str(tmp_path / "none.csv"), '--output', str(tmp_path / "out.csv")]) == 1


def test_add_tile_id_column():
    df = pd.DataFrame({"lat": [30.6298828125], "lon": [111.8408203125]})
    result = add_tile_id_column(df, 10)
    assert list(result["tile_id"]) == [67411448]
    assert "tile_id" not in df.columns


def test_tile_size_meters():
    width_m, height_m = tile_size_meters(556236300)
    # レベル13の図幅は約0.022度四方
    assert 2000 < width_m < 2200
    assert 2400 < height_m < 2500
