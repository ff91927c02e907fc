from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union


class StagePosition(str, Enum):
    OFFSCREEN = "offscreen"
    LEFT = "left"
    MIDLEFT = "midleft"
    CENTER = "center"
    MIDRIGHT = "midright"
    RIGHT = "right"


# Ordered on-screen slots, leftmost first. OFFSCREEN has no slot.
STAGE_SLOTS: Tuple[StagePosition, ...] = (
    StagePosition.LEFT,
    StagePosition.MIDLEFT,
    StagePosition.CENTER,
    StagePosition.MIDRIGHT,
    StagePosition.RIGHT,
)

StageSnapshot = Tuple[Optional[str], ...]


@dataclass(frozen=True)
class Character:
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class Statement:
    kind: ClassVar[str] = "statement"

    def describe(self) -> str:
        return self.kind


@dataclass(frozen=True)
class Definition(Statement):
    kind: ClassVar[str] = "define"
    key: str
    character: Character

    def describe(self) -> str:
        return f"define {self.key}: {self.character.name}"


@dataclass(frozen=True)
class Label(Statement):
    kind: ClassVar[str] = "label"
    key: str

    def describe(self) -> str:
        return f"Label: {self.key}"


@dataclass(frozen=True)
class Dialogue(Statement):
    kind: ClassVar[str] = "dialogue"
    character_key: str
    text: str

    def describe(self) -> str:
        return f"{self.character_key}: {self.text}"


@dataclass(frozen=True)
class Menu(Statement):
    kind: ClassVar[str] = "menu"

    def describe(self) -> str:
        return "Menu"


@dataclass(frozen=True)
class Choice(Statement):
    kind: ClassVar[str] = "choice"
    text: str

    def describe(self) -> str:
        return f"Choice: {self.text}"


@dataclass(frozen=True)
class Jump(Statement):
    kind: ClassVar[str] = "jump"
    key: str

    def describe(self) -> str:
        return f"Jump: {self.key}"


@dataclass(frozen=True)
class End(Statement):
    kind: ClassVar[str] = "end"

    def describe(self) -> str:
        return "End"


@dataclass(frozen=True)
class Show(Statement):
    kind: ClassVar[str] = "show"
    key: str
    position: StagePosition = StagePosition.CENTER

    @property
    def primary_name(self) -> str:
        return primary_name(self.key)

    def describe(self) -> str:
        return f"Show: {self.key} at {self.position.value}"


@dataclass(frozen=True)
class StageDirection(Statement):
    kind: ClassVar[str] = "stage"
    position: StagePosition

    def describe(self) -> str:
        return f"Stage: {self.position.value}"


@dataclass(frozen=True)
class Scene(Statement):
    kind: ClassVar[str] = "scene"

    def describe(self) -> str:
        return "Scene"


@dataclass(frozen=True)
class LogicalLine:
    indent: int
    statement: Statement
    line_number: int = 0

    def describe(self) -> str:
        return " " * self.indent + self.statement.describe()


def primary_name(sprite_key: str) -> str:
    """First token of a sprite key: ``"eileen happy"`` -> ``"eileen"``."""
    parts = sprite_key.split()
    return parts[0] if parts else sprite_key


@dataclass
class StageState:
    """Five on-screen slots, each holding at most one sprite key."""

    slots: List[Optional[str]] = field(default_factory=lambda: [None] * len(STAGE_SLOTS))

    def show(self, sprite_key: str, position: StagePosition) -> None:
        name = primary_name(sprite_key)
        for idx, occupant in enumerate(self.slots):
            if occupant is not None and primary_name(occupant) == name:
                self.slots[idx] = None
        if position is StagePosition.OFFSCREEN:
            return
        self.slots[STAGE_SLOTS.index(position)] = sprite_key

    def clear(self) -> None:
        self.slots = [None] * len(STAGE_SLOTS)

    def snapshot(self) -> StageSnapshot:
        return tuple(self.slots)


@dataclass(frozen=True)
class MenuOption:
    text: str
    target: Optional[str] = None


@dataclass(frozen=True)
class DialogueBody:
    speaker_name: str
    text: str
    speaker_color: Optional[str] = None


@dataclass(frozen=True)
class MenuBody:
    speaker_name: str
    prompt: str
    choices: Tuple[MenuOption, ...]
    speaker_color: Optional[str] = None


SlideBody = Union[DialogueBody, MenuBody]


@dataclass
class Slide:
    index: int
    source_index: int
    body: SlideBody
    labels: Tuple[str, ...] = ()
    stage: Optional[StageSnapshot] = None
    jump_target: Optional[str] = None
    is_terminal: bool = False

    @property
    def label(self) -> Optional[str]:
        """Most recent label before this slide; earlier ones are kept in ``labels``."""
        return self.labels[-1] if self.labels else None

    @property
    def is_menu(self) -> bool:
        return isinstance(self.body, MenuBody)

    @property
    def speaker_name(self) -> str:
        return self.body.speaker_name

    @property
    def anchor(self) -> str:
        return slide_anchor(self.index)

    @property
    def falls_through(self) -> bool:
        """Ordinary dialogue slides link to the next slide when no jump is set."""
        return self.jump_target is None and not self.is_menu and not self.is_terminal


def slide_anchor(index: int) -> str:
    return f"slide-{index}"
