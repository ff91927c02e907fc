from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from PIL import Image  # noqa: E402

from vn_slides.assets import SpriteAssetResolver  # noqa: E402
from vn_slides.models import DialogueBody, MenuBody, MenuOption, Slide  # noqa: E402
from vn_slides.renderer import BeamerRenderer, RendererConfig  # noqa: E402
from vn_slides.utils import escape_latex, hex_to_rgb  # noqa: E402


def _dialogue(index: int, text: str, **kwargs) -> Slide:
    return Slide(index=index, source_index=index, body=DialogueBody(speaker_name="Eileen", text=text), **kwargs)


def test_escape_latex_special_characters() -> None:
    assert escape_latex("50% off_#1") == r"50\% off\_\#1"
    assert escape_latex("a & b {c} $d ~ ^") == r"a \& b \{c\} \$d \textasciitilde{} \textasciicircum{}"
    assert escape_latex("back\\slash") == r"back\textbackslash{}slash"


def test_escape_latex_empty_and_newlines() -> None:
    assert escape_latex("") == "~"
    assert escape_latex("one\ntwo") == "one\\\\\ntwo"


def test_escape_latex_leading_newline_has_a_line_to_end() -> None:
    assert escape_latex("\nHi") == "\\mbox{}\\\\\nHi"


def test_hex_to_rgb_variants() -> None:
    assert hex_to_rgb("#c8ffc8") == (200, 255, 200)
    assert hex_to_rgb("#fff") == (255, 255, 255)
    assert hex_to_rgb("#11223344") == (17, 34, 51)
    assert hex_to_rgb("red") is None
    assert hex_to_rgb(None) is None


def test_document_has_title_frame_and_terminator() -> None:
    renderer = BeamerRenderer(RendererConfig(title="My_Story", author="Ann"))
    output = renderer.render([_dialogue(0, "Hi")])

    assert output.startswith("\\documentclass{beamer}\n")
    assert "\\title{My\\_Story}" in output
    assert "\\author{Ann}" in output
    assert output.index("\\titlepage") < output.index("\\hypertarget{slide-0}{}")
    assert output.endswith("\\end{document}\n")
    assert "\\usepackage{hyperref}" not in output


def test_navigation_links() -> None:
    slides = [
        _dialogue(0, "first", labels=("start",)),
        _dialogue(1, "second", jump_target="start"),
        _dialogue(2, "third"),
        Slide(index=3, source_index=5, body=DialogueBody(speaker_name="", text="End"), is_terminal=True),
    ]
    output = BeamerRenderer(RendererConfig()).render(slides)
    frames = output.split("\\begin{frame}")[2:]

    assert "\\hypertarget{start}{}" in frames[0]
    assert "\\hyperlink{slide-1}{\\beamergotobutton{Next}}" in frames[0]
    assert "\\hyperlink{start}{\\beamergotobutton{Next}}" in frames[1]
    assert "\\hyperlink{slide-3}{\\beamergotobutton{Next}}" in frames[2]
    assert "beamergotobutton" not in frames[3]


def test_menu_frame_links_each_choice() -> None:
    menu = Slide(
        index=0,
        source_index=3,
        body=MenuBody(
            speaker_name="Eileen",
            prompt="Pick 1 of 2",
            choices=(MenuOption(text="Yes_please", target="go_yes"), MenuOption(text="Maybe", target=None)),
        ),
    )
    output = BeamerRenderer(RendererConfig()).render([menu, _dialogue(1, "after")])
    menu_frame = output.split("\\begin{frame}")[2]

    assert "Pick 1 of 2" in menu_frame
    assert "\\item \\hyperlink{go_yes}{Yes\\_please}" in menu_frame
    assert "\\item Maybe" in menu_frame
    assert "beamergotobutton" not in menu_frame


def test_speaker_title_uses_character_color() -> None:
    slide = Slide(index=0, source_index=0, body=DialogueBody(speaker_name="Eileen", text="x", speaker_color="#c8ffc8"))
    output = BeamerRenderer(RendererConfig()).render([slide])
    assert "\\begin{frame}{\\textcolor[RGB]{200,255,200}{Eileen}}" in output


def test_empty_text_renders_placeholder() -> None:
    output = BeamerRenderer(RendererConfig()).render([_dialogue(0, "")])
    frame = output.split("\\begin{frame}")[2]
    assert "\n~\n" in frame


def test_stage_row_only_includes_existing_images(tmp_path: Path) -> None:
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    Image.new("RGB", (40, 80), (255, 0, 0)).save(image_dir / "eileen_happy.png")

    resolver = SpriteAssetResolver(image_dir)
    renderer = BeamerRenderer(RendererConfig(), assets=resolver)
    slides = [
        _dialogue(0, "with sprite", stage=("eileen happy", None, "ghost", None, None)),
        _dialogue(1, "no sprite", stage=(None, None, "ghost", None, None)),
    ]
    output = renderer.render(slides, base_dir=tmp_path)
    first, second = output.split("\\begin{frame}")[2:]

    assert "\\includegraphics[width=\\linewidth]{images/eileen_happy.png}" in first
    assert first.count("\\begin{column}") == 5
    assert first.count("\\includegraphics") == 1
    assert "\\begin{columns}" not in second
    assert resolver.resolved()["eileen happy"].size == (40, 80)


def test_unreadable_sprite_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "broken.png").write_bytes(b"not an image")
    resolver = SpriteAssetResolver(tmp_path)
    assert resolver.resolve("broken") is None


def test_every_label_on_a_slide_gets_a_target() -> None:
    slides = [
        _dialogue(0, "Hi", labels=("start", "intro")),
        Slide(
            index=1,
            source_index=2,
            body=MenuBody(speaker_name="", prompt="", choices=(MenuOption(text="Again", target="start"),)),
        ),
    ]
    output = BeamerRenderer(RendererConfig()).render(slides)
    first = output.split("\\begin{frame}")[2]

    assert "\\hypertarget{start}{}" in first
    assert "\\hypertarget{intro}{}" in first
    assert "\\item \\hyperlink{start}{Again}" in output
