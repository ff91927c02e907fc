from __future__ import annotations

from typing import Dict, Iterable, Iterator

from logging_utils import get_logger

from .errors import UnknownCharacterError
from .models import Character, Definition, LogicalLine

logger = get_logger(__name__)

NARRATOR_KEY = ""
NARRATOR = Character(name="", color=None)


class CharacterRegistry:
    """Read-only mapping of character key to ``Character``.

    The narrator (empty key) is always present so unattributed dialogue
    resolves to an empty speaker name.
    """

    def __init__(self, characters: Dict[str, Character] | None = None) -> None:
        self._characters: Dict[str, Character] = {NARRATOR_KEY: NARRATOR}
        if characters:
            self._characters.update(characters)

    @classmethod
    def from_lines(cls, lines: Iterable[LogicalLine]) -> "CharacterRegistry":
        characters: Dict[str, Character] = {}
        for line in lines:
            statement = line.statement
            if not isinstance(statement, Definition):
                continue
            if statement.key in characters:
                logger.debug("Character %s redefined on line %d", statement.key, line.line_number)
            characters[statement.key] = statement.character
        logger.info("Character registry built: %d characters", len(characters))
        return cls(characters)

    def lookup(self, key: str) -> Character:
        try:
            return self._characters[key]
        except KeyError:
            raise UnknownCharacterError(f"unknown character key {key!r}") from None

    def __contains__(self, key: object) -> bool:
        return key in self._characters

    def __iter__(self) -> Iterator[str]:
        return iter(self._characters)

    def __len__(self) -> int:
        return len(self._characters)
