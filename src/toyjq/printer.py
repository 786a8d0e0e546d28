"""Convert JSON values to documents and pretty-print them."""

from __future__ import annotations

import math

from toyjq.doc import Doc, DocElem, Flatable, Literal, Newline, Text, render
from toyjq.values import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

DEFAULT_WIDTH = 80
DEFAULT_INDENT = 2


def format_number(value: float) -> str:
    """Integral values print without a fractional part, keeping the sign of -0."""
    if math.isfinite(value) and value == int(value) and abs(value) < 1e16:
        return f"{value:.0f}"
    return repr(value)


def to_doc(value: JsonValue, indent: int = DEFAULT_INDENT) -> DocElem:
    """Document for ``value``; non-empty containers become groups."""
    if isinstance(value, JsonNumber):
        return Text(format_number(value.value))
    if isinstance(value, JsonString):
        return Text(f'"{value.value}"')
    if isinstance(value, JsonBool):
        return Literal("true" if value.value else "false")
    if isinstance(value, JsonNull):
        return Literal("null")
    if isinstance(value, JsonArray):
        entries = [[to_doc(item, indent)] for item in value.items]
        return _bracketed("[", "]", entries, indent)
    if isinstance(value, JsonObject):
        entries = [
            [Text(f'"{key}"'), Literal(": "), to_doc(item, indent)]
            for key, item in value.members
        ]
        return _bracketed("{", "}", entries, indent)
    raise TypeError(f"not a JSON value: {value!r}")


def _bracketed(
    open_: str, close: str, entries: list[list[DocElem]], indent: int,
) -> DocElem:
    if not entries:
        return Literal(open_ + close)
    children: list[DocElem] = [Literal(open_), Newline(indent)]
    for i, entry in enumerate(entries):
        if i > 0:
            children.extend([Literal(","), Newline(0)])
        children.extend(entry)
    children.extend([Newline(-indent), Literal(close)])
    return Flatable(children)


def dumps(
    value: JsonValue, width: int = DEFAULT_WIDTH, indent: int = DEFAULT_INDENT,
) -> str:
    """Pretty-print ``value`` for a target line ``width``."""
    return render(Doc([to_doc(value, indent)]), width)
