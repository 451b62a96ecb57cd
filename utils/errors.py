"""
Error definitions and diagnostics for the G-code editor.

Parsing is permissive: problems found in a line are recorded as diagnostics
in an ErrorCollector and the line is skipped. Exceptions are reserved for
misuse of the API and for configuration files that cannot be read.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, List


class ErrorType(Enum):
    UNRECOGNIZED_LINE = "unrecognized_line"   # line dropped
    MALFORMED_WORD = "malformed_word"         # word skipped, line kept


@dataclass
class GCodeError:
    """A diagnostic tied to a position in the G-code text."""
    line_number: int
    char_start: int
    char_end: int
    message: str
    error_type: ErrorType

    def __str__(self):
        return f"Line {self.line_number}: {self.message}"


class ErrorCollector:
    """Collects diagnostics produced while parsing G-code."""

    def __init__(self):
        self.errors: List[GCodeError] = []

    def add_error(self, line_number: int, char_start: int, char_end: int,
                  message: str, error_type: ErrorType):
        """Add a diagnostic to the collection."""
        error = GCodeError(line_number, char_start, char_end, message, error_type)
        self.errors.append(error)

    def get_lines_with_errors(self, error_type: Optional[ErrorType] = None) -> List[int]:
        """Line numbers that carry at least one diagnostic, sorted."""
        lines = {error.line_number for error in self.errors
                 if error_type is None or error.error_type == error_type}
        return sorted(lines)

    def clear(self):
        """Clear all diagnostics."""
        self.errors.clear()

    def get_all_errors(self) -> List[GCodeError]:
        """Get all diagnostics sorted by line number."""
        return sorted(self.errors, key=lambda e: (e.line_number, e.char_start))

    def __len__(self):
        return len(self.errors)


class GCodeEditorError(Exception):
    """Base class for exceptions raised by the editor."""


class ConfigError(GCodeEditorError):
    """Raised when an editor configuration file cannot be loaded."""

    def __init__(self, filepath: str, reason: str):
        super().__init__(f"Cannot load configuration '{filepath}': {reason}")
        self.filepath = filepath
        self.reason = reason
