import json
import sys

import mazegen


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["mazegen", *argv])
    return mazegen.main()


def test_cli_writes_maze_and_metadata(monkeypatch, tmp_path, circle_png):
    src = tmp_path / "circle.png"
    src.write_bytes(circle_png)
    base = tmp_path / "out"

    code = run_cli(
        monkeypatch, "-i", str(src), "-o", str(base), "-W", "30", "-H", "20",
        "--seed", "3", "--save-edges",
    )

    assert code == 0
    text = (tmp_path / "out.txt").read_text(encoding="utf-8")
    assert len(text.split("\n")) == 20
    meta = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
    assert meta["success"] is True
    assert meta["maze"] == text
    assert meta["metadata"]["height"] == 20
    assert (tmp_path / "out_edges.png").read_bytes()[:4] == b"\x89PNG"


def test_cli_prints_maze(monkeypatch, tmp_path, gray_png, capsys):
    src = tmp_path / "gray.png"
    src.write_bytes(gray_png)
    code = run_cli(monkeypatch, "-i", str(src), "-o", str(tmp_path / "g"), "-W", "12", "-H", "12", "--print")
    assert code == 0
    out = capsys.readouterr().out
    assert "S" in out and "E" in out


def test_cli_reports_failures(monkeypatch, tmp_path, gray_png):
    src = tmp_path / "gray.png"
    src.write_bytes(gray_png)
    assert run_cli(monkeypatch, "-i", str(src), "-o", str(tmp_path / "x"), "-W", "300") == 1
    assert not (tmp_path / "x.txt").exists()


def test_cli_missing_input(monkeypatch, tmp_path):
    assert run_cli(monkeypatch, "-i", str(tmp_path / "nope.png"), "-o", str(tmp_path / "x")) == 1
