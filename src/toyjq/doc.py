"""Document tree and width-sensitive pretty printer.

A document is a sequence of elements. ``Flatable`` groups are rendered on
one line (newlines become single spaces) when their flattened width fits in
what is left of the current line, and expanded otherwise. The decision is
made once per group, outermost first, in a single left-to-right pass.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

# ── Elements ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Literal:
    """Fixed text known when the document is built."""

    text: str


@dataclass(frozen=True)
class Text:
    """Text computed from data (numbers, strings)."""

    text: str


@dataclass(frozen=True)
class Newline:
    """Line break; the indent changes by ``delta`` before padding."""

    delta: int = 0


@dataclass(frozen=True)
class Flatable:
    """A group rendered either entirely flat or expanded."""

    children: list[DocElem] = field(default_factory=list)


DocElem = Union[Literal, Text, Newline, Flatable]


@dataclass(frozen=True)
class Doc:
    """Top-level element list; never flattened as a whole."""

    elems: list[DocElem] = field(default_factory=list)

    def render(self, width: int) -> str:
        return render(self, width)


# ── Flat layout ──────────────────────────────────────────────────


def flat_width(elems: Sequence[DocElem]) -> int:
    """Length of ``elems`` with every group flattened."""
    total = 0
    for elem in elems:
        if isinstance(elem, (Literal, Text)):
            total += len(elem.text)
        elif isinstance(elem, Newline):
            total += 1
        else:
            total += flat_width(elem.children)
    return total


def flatten(elems: Sequence[DocElem]) -> str:
    """Render ``elems`` on a single line."""
    parts: list[str] = []
    _flatten_into(elems, parts)
    return "".join(parts)


def _flatten_into(elems: Sequence[DocElem], parts: list[str]) -> None:
    for elem in elems:
        if isinstance(elem, (Literal, Text)):
            parts.append(elem.text)
        elif isinstance(elem, Newline):
            parts.append(" ")
        else:
            _flatten_into(elem.children, parts)


# ── Rendering ────────────────────────────────────────────────────


class _Layout:
    """State owned by one ``render`` call."""

    def __init__(self, width: int) -> None:
        self.width = width
        self.remaining = width
        self.indent = 0
        self.parts: list[str] = []

    def walk(self, elems: Sequence[DocElem]) -> None:
        for elem in elems:
            if isinstance(elem, (Literal, Text)):
                self.parts.append(elem.text)
                self.remaining -= len(elem.text)
            elif isinstance(elem, Newline):
                self.indent += elem.delta
                self.parts.append("\n" + " " * self.indent)
                self.remaining = self.width - self.indent
            elif flat_width(elem.children) <= self.remaining:
                flat = flatten(elem.children)
                self.parts.append(flat)
                self.remaining -= len(flat)
            else:
                self.walk(elem.children)


def render(doc: Doc | Sequence[DocElem], width: int) -> str:
    """Lay ``doc`` out for a target line ``width``."""
    if width < 0:
        raise ValueError(f"width must be non-negative, got {width}")
    elems = doc.elems if isinstance(doc, Doc) else doc
    layout = _Layout(width)
    layout.walk(elems)
    return "".join(layout.parts)
