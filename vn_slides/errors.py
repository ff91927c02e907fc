"""Exceptions raised while compiling a script into slides."""
from __future__ import annotations

from typing import Optional


class ScriptError(ValueError):
    """Base exception for script compilation failures."""

    def __init__(self, message: str, *, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class UnrecognizedLineError(ScriptError):
    """Raised when no statement marker matches a line. Callers drop the line."""


class MalformedStatementError(ScriptError):
    """Raised when a recognized statement is missing part of its payload."""


class UnknownCharacterError(ScriptError):
    """Raised when dialogue refers to a character key that was never defined."""


class MissingEntryLabelError(ScriptError):
    """Raised when the traversal entry label does not exist in the script."""
