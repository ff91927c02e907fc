from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple

from logging_utils import get_logger

from .assembler import LogicalLineAssembler
from .classifier import KnownKeys, classify_line, indentation_of
from .errors import UnrecognizedLineError
from .models import LogicalLine
from .registry import CharacterRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class SkippedLine:
    line_number: int
    text: str
    reason: str


@dataclass
class ScriptDocument:
    source_path: Path
    lines: List[LogicalLine]
    registry: CharacterRegistry
    skipped: List[SkippedLine] = field(default_factory=list)

    def dump_lines(self) -> str:
        return "\n".join(line.describe() for line in self.lines)


def parse_script_lines(raw_lines: Iterable[str]) -> Tuple[List[LogicalLine], List[SkippedLine]]:
    """Classify and assemble physical lines in source order.

    Malformed statements propagate; unrecognized lines are logged and dropped.
    """
    known_keys = KnownKeys()
    assembler = LogicalLineAssembler()
    skipped: List[SkippedLine] = []

    for line_number, raw_line in enumerate(raw_lines, start=1):
        line = raw_line.rstrip("\r\n")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            statement = classify_line(line, known_keys, line_number=line_number)
        except UnrecognizedLineError as exc:
            logger.warning("Skipping %s", exc)
            skipped.append(SkippedLine(line_number=line_number, text=stripped, reason=str(exc)))
            continue
        assembler.append(LogicalLine(indent=indentation_of(line), statement=statement, line_number=line_number))

    logger.debug(
        "Assembled %d logical lines (%d stage directions folded, %d lines skipped)",
        len(assembler),
        assembler.folded,
        len(skipped),
    )
    return assembler.lines, skipped


def load_script(path: Path | str) -> ScriptDocument:
    script_path = Path(path).expanduser().resolve()
    if not script_path.exists():
        raise FileNotFoundError(f"Script file not found: {script_path}")

    raw_text = script_path.read_text(encoding="utf-8")
    if not raw_text.strip():
        raise ValueError("Script file is empty")

    lines, skipped = parse_script_lines(raw_text.splitlines())
    registry = CharacterRegistry.from_lines(lines)

    logger.info(
        "Loaded script: %s (%d logical lines, %d skipped)",
        script_path.name,
        len(lines),
        len(skipped),
    )
    return ScriptDocument(source_path=script_path, lines=lines, registry=registry, skipped=skipped)
