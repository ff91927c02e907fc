from __future__ import annotations

from typing import Optional, Tuple

_LATEX_ESCAPES = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "\n": "\\\\\n",
}
_LATEX_TABLE = str.maketrans(_LATEX_ESCAPES)

EMPTY_TEXT = "~"


def escape_latex(text: str) -> str:
    """Escape markup-significant characters; empty text becomes a non-breaking space."""
    if not text:
        return EMPTY_TEXT
    escaped = text.translate(_LATEX_TABLE)
    # \\ at the start of a paragraph is a LaTeX error
    if text.startswith("\n"):
        escaped = r"\mbox{}" + escaped
    return escaped


def hex_to_rgb(value: str | None) -> Optional[Tuple[int, int, int]]:
    """Parse ``#rgb``/``#rrggbb``/``#rrggbbaa``; ``None`` when the value is not a hex color."""
    if not value:
        return None
    text = value.strip().lstrip("#")
    if len(text) in (3, 4):
        text = "".join(ch * 2 for ch in text)
    if len(text) == 8:
        text = text[:6]
    if len(text) != 6:
        return None
    try:
        r = int(text[0:2], 16)
        g = int(text[2:4], 16)
        b = int(text[4:6], 16)
    except ValueError:
        return None
    return (r, g, b)


def asset_stem(sprite_key: str) -> str:
    """``"eileen happy"`` -> ``"eileen_happy"``; LaTeX paths cannot contain spaces."""
    return "_".join(sprite_key.split())
