"""Parse failures and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from toyjq.source import SourceText, Span


class ParseError(Exception):
    """A parser failure at an absolute input offset.

    ``retry`` tells an enclosing alternation whether it may discard this
    failure and try another branch. Committed failures (``retry=False``)
    propagate to the top of the parse unchanged.
    """

    def __init__(self, message: str, pos: int, *, retry: bool = True) -> None:
        self.message = message
        self.pos = pos
        self.retry = retry
        super().__init__(f"{message} (at offset {pos})")

    def with_retry(self, retry: bool, pos: int | None = None) -> ParseError:
        """Copy of this error with a rewritten retry flag (and offset)."""
        return ParseError(
            self.message, self.pos if pos is None else pos, retry=retry,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.retry, self.message, self.pos) == (
            other.retry, other.message, other.pos,
        )

    def __hash__(self) -> int:
        return hash((self.retry, self.message, self.pos))

    def __repr__(self) -> str:
        return (
            f"ParseError(retry={self.retry}, message={self.message!r}, "
            f"pos={self.pos})"
        )


class ConfigError(Exception):
    """Malformed ``.toyjq.toml`` contents."""


class Severity(Enum):
    ERROR = "error"
    NOTE = "note"


# Diagnostic codes
RECOVERABLE_FAILURE = "E0001"
COMMITTED_FAILURE = "E0002"

# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def diagnostic_for(error: ParseError, source: SourceText) -> Diagnostic:
    """Build a diagnostic pointing at the offset a parse failed at."""
    span = source.span_at(error.pos)
    if error.retry:
        code = RECOVERABLE_FAILURE
        label = "no alternative matched here"
    else:
        code = COMMITTED_FAILURE
        label = "unexpected input here"
    notes = [f"failure at offset {error.pos}"]
    if error.pos >= len(source.content):
        notes.append("input ended before the value was complete")
    return Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=error.message,
        labels=[DiagnosticLabel(span=span, message=label)],
        notes=notes,
    )


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, source: SourceText, *, color: bool = True) -> None:
        self.source = source
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        color = _COLORS[diag.severity]

        # Header: error[E0002]: message
        lines.append(
            f"{self._c(color)}{diag.severity.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")
            lines.append(
                f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} "
                f"{self.source.line_at(span.start_line)}"
            )

            caret_len = max(1, span.end_col - span.start_col + 1)
            padding = " " * (span.start_col - 1)
            carets = "^" * caret_len
            suffix = f" {label.message}" if label.message else ""
            lines.append(
                f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                f"{padding}{self._c(color)}{carets}{suffix}{self._c(_RESET)}"
            )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)
