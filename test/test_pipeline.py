from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from PIL import Image  # noqa: E402

from config_loader import default_config, load_config  # noqa: E402
from vn_slides.main import main  # noqa: E402
from vn_slides.pipeline import SlidePipeline  # noqa: E402
from vn_slides.script_loader import load_script  # noqa: E402


SCRIPT = """\
define e = Character("Eileen", color="#c8ffc8")
image bg room = "room.png"

label start:
    scene bg room
    show eileen happy at left
    e "Welcome to 50% off_#1 day!"
    menu:
        "Stay":
            jump stay
        "Leave":
            jump leave

label stay:
    e "Glad you stayed."
    return

label leave:
    "The door closes."
    return
"""


def _write_script(tmp_path: Path, text: str = SCRIPT) -> Path:
    script_path = tmp_path / "story.rpy"
    script_path.write_text(text, encoding="utf-8")
    return script_path


def test_load_script_reports_skipped_lines(tmp_path: Path) -> None:
    document = load_script(_write_script(tmp_path))

    assert "e" in document.registry
    assert [entry.line_number for entry in document.skipped] == [2]
    assert document.dump_lines().splitlines()[0] == "define e: Eileen"
    assert "        Choice: Stay" in document.dump_lines().splitlines()


def test_load_script_missing_and_empty(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_script(tmp_path / "missing.rpy")
    empty = tmp_path / "empty.rpy"
    empty.write_text("  \n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_script(empty)


def test_pipeline_writes_document_and_plan(tmp_path: Path) -> None:
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    Image.new("RGBA", (32, 64), (0, 0, 255, 255)).save(image_dir / "eileen_happy.png")

    config = default_config(tmp_path)
    result = SlidePipeline(config).run(_write_script(tmp_path))

    assert result.output_path == (tmp_path / "output" / "story.tex").resolve()
    tex = result.output_path.read_text(encoding="utf-8")
    assert "\\title{story}" in tex
    assert r"Welcome to 50\% off\_\#1 day!" in tex
    assert "\\includegraphics[width=\\linewidth]{../images/eileen_happy.png}" in tex
    assert "\\hyperlink{leave}{Leave}" in tex

    plan = json.loads(result.plan_path.read_text(encoding="utf-8"))
    assert plan["document"] == "story.tex"
    assert [slide["index"] for slide in plan["slides"]] == list(range(6))
    assert plan["slides"][0]["labels"] == ["start"]
    assert plan["slides"][1]["choices"] == [
        {"text": "Stay", "target": "stay"},
        {"text": "Leave", "target": "leave"},
    ]
    assert plan["sprites"]["eileen happy"] == {"path": "eileen_happy.png", "width": 32, "height": 64}


def test_pipeline_is_idempotent(tmp_path: Path) -> None:
    script_path = _write_script(tmp_path)
    pipeline = SlidePipeline(default_config(tmp_path))

    first = pipeline.run(script_path, output_path=tmp_path / "a" / "deck.tex")
    second = pipeline.run(script_path, output_path=tmp_path / "b" / "deck.tex")

    assert first.output_path.read_bytes() == second.output_path.read_bytes()


def test_config_overrides_entry_label_and_title(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "traversal:\n  entry_label: leave\nrender:\n  title: Deck Title\n  theme: Madrid\n",
        encoding="utf-8",
    )
    config = load_config(config_path)
    result = SlidePipeline(config).run(_write_script(tmp_path))

    assert result.slides[0].label == "leave"
    assert result.slides[0].body.text == "The door closes."
    tex = result.output_path.read_text(encoding="utf-8")
    assert "\\usetheme{Madrid}" in tex
    assert "\\title{Deck Title}" in tex


def test_cli_writes_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    script_path = _write_script(tmp_path)
    output_path = tmp_path / "deck.tex"

    assert main([str(script_path), "--output", str(output_path), "--title", "CLI"]) == 0
    assert "\\title{CLI}" in output_path.read_text(encoding="utf-8")
    assert (tmp_path / "logs" / "run.log").exists()


def test_cli_dump_lines(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    assert main([str(_write_script(tmp_path)), "--dump-lines"]) == 0
    out = capsys.readouterr().out
    assert "Label: start" in out
    assert "    Show: eileen happy at left" in out


def test_cli_returns_error_for_unknown_character(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    script_path = _write_script(tmp_path, 'label start:\n    $ renpy.say(z, "Who?")\n    return\n')
    assert main([str(script_path)]) == 1
