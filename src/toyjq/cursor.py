"""Immutable input cursor threaded through the parser combinators."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Cursor:
    """A position inside an input string.

    Consuming operations return a new cursor; the old one stays valid so an
    alternative can be retried from it. Offsets count characters.
    """

    body: str
    pos: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.pos <= len(self.body):
            raise ValueError(
                f"cursor offset {self.pos} outside input of length {len(self.body)}"
            )

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.body)

    def take(self, n: int) -> str:
        """Return up to ``n`` characters from the current position."""
        return self.body[self.pos : self.pos + n]

    def startswith(self, prefix: str) -> bool:
        return self.body.startswith(prefix, self.pos)

    def find(self, needle: str) -> int:
        """Absolute offset of the next ``needle``, or -1."""
        return self.body.find(needle, self.pos)

    def advance(self, n: int = 1) -> Cursor:
        return Cursor(self.body, min(self.pos + n, len(self.body)))

    def seek(self, pos: int) -> Cursor:
        return Cursor(self.body, pos)
