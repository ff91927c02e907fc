"""Fold stage-direction lines into the ``show`` statement they modify."""
from __future__ import annotations

from dataclasses import replace
from typing import List

from logging_utils import get_logger

from .models import LogicalLine, Show, StageDirection

logger = get_logger(__name__)


class LogicalLineAssembler:
    """Collect classified lines with a one-step look-back.

    ``append`` must be called for each line before the next one is classified,
    so a ``show`` and the direction on the line right after it end up as one
    logical line.
    """

    def __init__(self) -> None:
        self.lines: List[LogicalLine] = []
        self.folded = 0

    def append(self, line: LogicalLine) -> None:
        self.lines.append(line)
        if len(self.lines) < 2:
            return
        current = self.lines[-1]
        previous = self.lines[-2]
        if isinstance(current.statement, StageDirection) and isinstance(previous.statement, Show):
            merged = replace(previous.statement, position=current.statement.position)
            self.lines[-2] = replace(previous, statement=merged)
            self.lines.pop()
            self.folded += 1
            logger.debug(
                "Folded stage direction (line %d) into show %s -> %s",
                current.line_number,
                merged.key,
                merged.position.value,
            )

    def __len__(self) -> int:
        return len(self.lines)
