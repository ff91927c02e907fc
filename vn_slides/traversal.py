"""Walk logical lines from the entry label and emit the ordered slide deck."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from logging_utils import get_logger

from .errors import MalformedStatementError, MissingEntryLabelError
from .models import (
    Choice,
    Dialogue,
    DialogueBody,
    End,
    Jump,
    Label,
    LogicalLine,
    Menu,
    MenuBody,
    MenuOption,
    Scene,
    Show,
    Slide,
    StageState,
)
from .registry import NARRATOR_KEY, CharacterRegistry

logger = get_logger(__name__)

END_TEXT = "End"


class MenuState(Enum):
    AWAITING_CHOICE = "awaiting_choice"
    AWAITING_JUMP = "awaiting_jump"


class MenuCollector:
    """Pair each menu choice with the jump that follows it."""

    def __init__(self) -> None:
        self.state = MenuState.AWAITING_CHOICE
        self.prompt: Optional[Dialogue] = None
        self._texts: List[str] = []
        self._targets: List[Optional[str]] = []

    @staticmethod
    def accepts(line: LogicalLine) -> bool:
        return isinstance(line.statement, (Choice, Jump, Dialogue))

    def feed(self, line: LogicalLine) -> None:
        statement = line.statement
        if isinstance(statement, Choice):
            if self.state is MenuState.AWAITING_JUMP:
                logger.warning("Menu choice %r has no jump target", self._texts[-1])
            self._texts.append(statement.text)
            self._targets.append(None)
            self.state = MenuState.AWAITING_JUMP
        elif isinstance(statement, Jump):
            if self.state is not MenuState.AWAITING_JUMP:
                raise MalformedStatementError(
                    f"menu jump to {statement.key!r} does not follow a choice",
                    line_number=line.line_number,
                )
            self._targets[-1] = statement.key
            self.state = MenuState.AWAITING_CHOICE
        elif isinstance(statement, Dialogue):
            self.prompt = statement
        else:
            raise TypeError(f"menu cannot consume {statement.kind} statements")

    def options(self) -> Tuple[MenuOption, ...]:
        if self.state is MenuState.AWAITING_JUMP:
            logger.warning("Menu choice %r has no jump target", self._texts[-1])
        return tuple(MenuOption(text=text, target=target) for text, target in zip(self._texts, self._targets))


def find_entry(lines: Sequence[LogicalLine], entry_label: str) -> Optional[int]:
    for idx, line in enumerate(lines):
        if isinstance(line.statement, Label) and line.statement.key == entry_label:
            return idx
    return None


class SlideBuilder:
    """Resolve a logical-line sequence into slides.

    Labels attach to the next emitted slide; jumps attach to the previous one.
    The stage is snapshotted by value into each dialogue and end slide.
    """

    def __init__(
        self,
        lines: Sequence[LogicalLine],
        registry: CharacterRegistry,
        *,
        allow_entry_fallback: bool = False,
    ) -> None:
        self.lines = list(lines)
        self.registry = registry
        self.allow_entry_fallback = allow_entry_fallback
        self._reset()

    def _reset(self) -> None:
        self.stage = StageState()
        self.slides: List[Slide] = []
        self.pending_labels: List[str] = []
        self.dispatched = 0

    def build(self, entry_label: str = "start") -> List[Slide]:
        self._reset()
        entry_index = find_entry(self.lines, entry_label)
        if entry_index is None:
            if not self.allow_entry_fallback:
                raise MissingEntryLabelError(f"entry label {entry_label!r} not found")
            logger.warning("Entry label %r not found; starting from the first line", entry_label)
            position = 0
        else:
            position = entry_index + 1
            self.pending_labels.append(entry_label)

        while position < len(self.lines):
            position = self._dispatch(position)

        if self.pending_labels:
            logger.warning("Labels %s at end of script have no slide to attach to", self.pending_labels)
        if not self.slides or not self.slides[-1].is_terminal:
            logger.warning("Script flow reaches the end without a return statement")
        logger.info("Traversal complete: %d slides from %d logical lines", len(self.slides), len(self.lines))
        return self.slides

    def _dispatch(self, position: int) -> int:
        line = self.lines[position]
        statement = line.statement

        if isinstance(statement, (Dialogue, Menu, End)):
            self.dispatched += 1

        if isinstance(statement, Dialogue):
            self._emit_dialogue(position, statement)
            return position + 1
        if isinstance(statement, Menu):
            return self._collect_menu(position)
        if isinstance(statement, Label):
            if self.pending_labels:
                logger.debug("Label %r shares a slide with %s", statement.key, self.pending_labels)
            self.pending_labels.append(statement.key)
            return position + 1
        if isinstance(statement, Jump):
            if self.slides:
                self.slides[-1].jump_target = statement.key
            else:
                logger.debug("Jump to %r before any slide; ignored", statement.key)
            return position + 1
        if isinstance(statement, End):
            self._emit(position, DialogueBody(speaker_name="", text=END_TEXT), stage=self.stage.snapshot(), terminal=True)
            return position + 1
        if isinstance(statement, Show):
            self.stage.show(statement.key, statement.position)
            return position + 1
        if isinstance(statement, Scene):
            self.stage.clear()
            return position + 1

        logger.debug("Skipping %s statement at logical line %d", statement.kind, position)
        return position + 1

    def _emit(self, position: int, body, *, stage=None, terminal: bool = False) -> Slide:
        slide = Slide(
            index=len(self.slides),
            source_index=position,
            body=body,
            labels=tuple(self.pending_labels),
            stage=stage,
            is_terminal=terminal,
        )
        self.pending_labels = []
        self.slides.append(slide)
        return slide

    def _emit_dialogue(self, position: int, statement: Dialogue) -> None:
        character = self.registry.lookup(statement.character_key)
        body = DialogueBody(speaker_name=character.name, text=statement.text, speaker_color=character.color)
        self._emit(position, body, stage=self.stage.snapshot())

    def _collect_menu(self, position: int) -> int:
        collector = MenuCollector()
        cursor = position + 1
        while cursor < len(self.lines) and collector.accepts(self.lines[cursor]):
            collector.feed(self.lines[cursor])
            cursor += 1

        prompt = collector.prompt
        character = self.registry.lookup(prompt.character_key if prompt else NARRATOR_KEY)
        body = MenuBody(
            speaker_name=character.name,
            prompt=prompt.text if prompt else "",
            choices=collector.options(),
            speaker_color=character.color,
        )
        self._emit(position, body)
        return cursor


def build_slides(
    lines: Sequence[LogicalLine],
    registry: CharacterRegistry,
    *,
    entry_label: str = "start",
    allow_entry_fallback: bool = False,
) -> List[Slide]:
    builder = SlideBuilder(lines, registry, allow_entry_fallback=allow_entry_fallback)
    return builder.build(entry_label)
