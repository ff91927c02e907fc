"""Turn one physical script line into a typed statement.

Markers are checked in a fixed order and the first match wins. Several markers
are substrings of later ones (``"Yes":`` is a quoted line before it is a stage
keyword, ``show`` lines mention positions), so the order below must not change:

1. ``define k = Character("Name", color="#rgb")``
2. ``label key:``
3. ``"quoted"`` line: a choice when the line ends with ``:``, else narration
4. ``menu:``
5. ``jump key``
6. ``return``
7. ``$ renpy.say(k, "text")``
8. ``show tag attrs at left``
9. ``scene ...``
10. stage-position keyword (``xalign 0.2``, ``midleft``, ``offscreenright`` ...)
11. ``k "text"`` for an already defined character key ``k``
"""
from __future__ import annotations

import re
from typing import Iterator, List, Optional

from .errors import MalformedStatementError, UnrecognizedLineError
from .models import (
    Character,
    Choice,
    Definition,
    Dialogue,
    End,
    Jump,
    Label,
    Menu,
    Scene,
    Show,
    StageDirection,
    StagePosition,
    Statement,
)

_QUOTED_RE = re.compile(r'"((?:[^"\\]|\\.)*)"')
_COLOR_RE = re.compile(r'color\s*=\s*"((?:[^"\\]|\\.)*)"')
_XALIGN_RE = re.compile(r"\bxalign\b\s*=?\s*(-?\d*\.?\d+)")
_STAGE_KEYWORD_RE = re.compile(
    r"\b(offscreenleft|offscreenright|xalign|midleft|midright|left|right|truecenter|center)\b"
)

_SHOW_CLAUSE_KEYWORDS = {"at", "with", "behind", "as", "onlayer", "zorder"}

_KEYWORD_POSITIONS = {
    "midleft": StagePosition.MIDLEFT,
    "midright": StagePosition.MIDRIGHT,
    "left": StagePosition.LEFT,
    "right": StagePosition.RIGHT,
    "truecenter": StagePosition.CENTER,
    "center": StagePosition.CENTER,
}


class KnownKeys:
    """Character keys defined so far, in definition order."""

    def __init__(self, keys: Optional[List[str]] = None) -> None:
        self._keys: List[str] = []
        for key in keys or []:
            self.add(key)

    def add(self, key: str) -> None:
        if key and key not in self._keys:
            self._keys.append(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def match_speaker(self, stripped: str) -> Optional[str]:
        for key in self._keys:
            if stripped.startswith(f"{key} "):
                return key
        return None


def normalize_text(text: str) -> str:
    return text.replace('\\"', '"').replace("\\n", "\n")


def indentation_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _quoted_strings(text: str) -> List[str]:
    return _QUOTED_RE.findall(text)


def _require_quoted(text: str, what: str, line_number: Optional[int]) -> List[str]:
    found = _quoted_strings(text)
    if not found:
        raise MalformedStatementError(f"{what} is missing a quoted string: {text!r}", line_number=line_number)
    return found


def _parse_definition(stripped: str, known_keys: KnownKeys, line_number: Optional[int]) -> Definition:
    head, sep, tail = stripped[len("define"):].partition("=")
    key = head.strip()
    if not sep or not key:
        raise MalformedStatementError(f"character definition without a key: {stripped!r}", line_number=line_number)

    call = tail[tail.find("Character(") + len("Character("):]
    name = normalize_text(_require_quoted(call, "character definition", line_number)[0])
    color_match = _COLOR_RE.search(call)
    color = color_match.group(1) if color_match else None

    known_keys.add(key)
    return Definition(key=key, character=Character(name=name, color=color))


def _parse_keyed(stripped: str, marker: str, line_number: Optional[int]) -> str:
    key = stripped[len(marker):].replace(":", "").strip()
    if not key:
        raise MalformedStatementError(f"{marker} without a target: {stripped!r}", line_number=line_number)
    return key


def _parse_say_call(stripped: str, line_number: Optional[int]) -> Dialogue:
    args = stripped[stripped.find("renpy.say(") + len("renpy.say("):]
    key, sep, rest = args.partition(",")
    key = key.strip()
    if not sep or not key:
        raise MalformedStatementError(f"renpy.say needs a character key and text: {stripped!r}", line_number=line_number)
    text = _require_quoted(rest, "renpy.say", line_number)[0]
    return Dialogue(character_key=key, text=normalize_text(text))


def _parse_show(stripped: str, line_number: Optional[int]) -> Show:
    tokens = stripped[len("show "):].rstrip(":").split()
    key_tokens: List[str] = []
    position = StagePosition.CENTER
    for idx, token in enumerate(tokens):
        if token in _SHOW_CLAUSE_KEYWORDS:
            if token == "at" and idx + 1 < len(tokens):
                target = tokens[idx + 1].rstrip(":,")
                if target == "left":
                    position = StagePosition.LEFT
                elif target == "right":
                    position = StagePosition.RIGHT
            break
        key_tokens.append(token)
    if not key_tokens:
        raise MalformedStatementError(f"show without an image: {stripped!r}", line_number=line_number)
    return Show(key=" ".join(key_tokens), position=position)


def _stage_position(stripped: str, line_number: Optional[int]) -> Optional[StagePosition]:
    unquoted = _QUOTED_RE.sub("", stripped)
    keywords = set(_STAGE_KEYWORD_RE.findall(unquoted))
    if not keywords:
        return None
    if "offscreenleft" in keywords or "offscreenright" in keywords:
        return StagePosition.OFFSCREEN
    if "xalign" in keywords:
        match = _XALIGN_RE.search(unquoted)
        if match is None:
            raise MalformedStatementError(f"xalign without a numeric value: {stripped!r}", line_number=line_number)
        value = float(match.group(1))
        if value < 0.33:
            return StagePosition.LEFT
        if value < 0.66:
            return StagePosition.CENTER
        return StagePosition.RIGHT
    for keyword, position in _KEYWORD_POSITIONS.items():
        if keyword in keywords:
            return position
    return None


def _parse_keyed_dialogue(stripped: str, key: str, line_number: Optional[int]) -> Dialogue:
    remainder = stripped[len(key) + 1:]
    quoted = _quoted_strings(remainder)
    if quoted:
        text = quoted[-1]
    elif '"' in remainder:
        raise MalformedStatementError(f"unterminated dialogue string: {stripped!r}", line_number=line_number)
    else:
        text = remainder.strip()
    return Dialogue(character_key=key, text=normalize_text(text))


def classify_line(line: str, known_keys: KnownKeys, *, line_number: Optional[int] = None) -> Statement:
    """Classify one physical line.

    A ``define`` line adds its key to ``known_keys`` so later lines can be
    attributed to it. Raises ``UnrecognizedLineError`` when nothing matches and
    ``MalformedStatementError`` when a marker matches but its payload is broken.
    """
    stripped = line.strip()

    if stripped.startswith("define") and "Character(" in stripped:
        return _parse_definition(stripped, known_keys, line_number)

    if stripped.startswith("label"):
        return Label(key=_parse_keyed(stripped, "label", line_number))

    if stripped.startswith('"'):
        if line.rstrip().endswith(":"):
            text = _require_quoted(stripped, "menu choice", line_number)[0]
            return Choice(text=normalize_text(text))
        text = _require_quoted(stripped, "dialogue", line_number)[-1]
        return Dialogue(character_key="", text=normalize_text(text))

    if stripped.startswith("menu"):
        return Menu()

    if stripped.startswith("jump"):
        return Jump(key=_parse_keyed(stripped, "jump", line_number))

    if stripped.startswith("return"):
        return End()

    if "renpy.say(" in stripped:
        return _parse_say_call(stripped, line_number)

    if stripped.startswith("show "):
        return _parse_show(stripped, line_number)

    if stripped.startswith("scene"):
        return Scene()

    position = _stage_position(stripped, line_number)
    if position is not None:
        return StageDirection(position=position)

    speaker = known_keys.match_speaker(stripped)
    if speaker is not None:
        return _parse_keyed_dialogue(stripped, speaker, line_number)

    raise UnrecognizedLineError(f"unrecognized line: {stripped!r}", line_number=line_number)
