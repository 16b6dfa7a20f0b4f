"""Test the genpinout command line."""

import pytest

from genpinout.cli import main

BOARD = """\
# test board
LABELS,DEFAULT,TYPE,GROUP,GPIO
TYPE,Output,#ffffff,1,blue,1
DRAW
ANCHOR,100,100
PINSET,LEFT,PACKED,CENTER,CENTER,10,60,10,20
PIN,,Output,,1,VCC,GPIO0
PIN,,Output,,2,GND,
"""


@pytest.fixture
def board(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "board.csv"
    path.write_text(BOARD, encoding="utf-8")
    return path


def test_writes_svg(board, tmp_path, capsys):
    out = tmp_path / "out.svg"
    main([str(board), str(out)])
    svg = out.read_text(encoding="utf-8")
    assert svg.startswith("<svg")
    assert svg.count("<rect") == 2
    assert "Pinout written to" in capsys.readouterr().out


def test_default_output_path(board, tmp_path):
    main([str(board)])
    assert (tmp_path / "svg" / "board.svg").exists()


def test_refuses_to_overwrite(board, tmp_path, capsys):
    out = tmp_path / "out.svg"
    out.write_text("keep me", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(board), str(out)])
    assert exc.value.code == 1
    assert out.read_text(encoding="utf-8") == "keep me"
    assert "--overwrite" in capsys.readouterr().err

    main([str(board), str(out), "-o"])
    assert out.read_text(encoding="utf-8").startswith("<svg")


def test_invalid_document_exits_nonzero(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    bad = tmp_path / "bad.csv"
    bad.write_text("DRAW\nDRAW\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(bad), str(tmp_path / "bad.svg")])
    assert exc.value.code == 1
    assert "command #1" in capsys.readouterr().err
    assert not (tmp_path / "bad.svg").exists()


def test_missing_input(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "nope.csv")])
    assert exc.value.code == 1


def test_usage_error():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_config_file_sets_output_dir(board, tmp_path):
    config = tmp_path / "custom.yaml"
    config.write_text("genpinout:\n  output_dir: diagrams\n", encoding="utf-8")
    main([str(board), "--config", str(config)])
    assert (tmp_path / "diagrams" / "board.svg").exists()
