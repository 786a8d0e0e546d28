"""JSON grammar built from the parser combinators.

``json_value`` refers to itself through ``lazy`` so that arrays and objects
can nest without recursing at construction time.
"""

from __future__ import annotations

import math

from toyjq.combinators import (
    Parser,
    char_in,
    char_not_in,
    end_of_input,
    fail,
    lazy,
    literal,
    one_char,
    succeed,
)
from toyjq.errors import ParseError
from toyjq.values import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

NUMBER_CHARS = "-0123456789.Ee+"
WHITESPACE = " \t\r\n"

_whitespace = char_in(WHITESPACE)


def _token(c: str) -> Parser[str]:
    return one_char(c).surrounded_by(_whitespace)


def _to_number(chars: list[str]) -> Parser[JsonValue]:
    text = "".join(chars)
    try:
        number = float(text)
    except ValueError:
        return fail(f"unable to parse a number: `{text}`")
    if not math.isfinite(number):
        return fail(f"number out of range: `{text}`")
    return succeed(JsonNumber(number))


# A backslash keeps the character after it, so `\"` stays inside the string.
_string_char = (
    one_char("\\").and_(char_not_in("")).map(lambda pair: pair[0] + pair[1])
    .or_(char_not_in('"\\'))
)

# An unterminated string fails where its contents start.
string_literal: Parser[str] = one_char('"').then(
    _string_char.many().map("".join).skip(one_char('"')).attempt()
)

json_string: Parser[JsonValue] = string_literal.map(JsonString)

json_null: Parser[JsonValue] = literal("null").map_to(JsonNull()).attempt()

json_bool: Parser[JsonValue] = (
    literal("true").map_to(JsonBool(True)).attempt()
    .or_(literal("false").map_to(JsonBool(False)))
    .attempt()
)

json_number: Parser[JsonValue] = char_in(NUMBER_CHARS).many().attempt().bind(_to_number)

_value_ref: Parser[JsonValue] = lazy(lambda: json_value)

_comma = _token(",")

json_array: Parser[JsonValue] = (
    _token("[")
    .then(_value_ref.sep_by(_comma))
    .skip(_token("]"))
    .map(JsonArray)
)

_member = string_literal.skip(_token(":")).and_(_value_ref)

json_object: Parser[JsonValue] = (
    _token("{")
    .then(_member.sep_by(_comma))
    .skip(_token("}"))
    .map(JsonObject)
)

json_value: Parser[JsonValue] = (
    json_array
    .or_(json_object)
    .or_(json_string)
    .or_(json_null)
    .or_(json_bool)
    .or_(json_number)
)

document: Parser[JsonValue] = _whitespace.many().then(json_value)

strict_document: Parser[JsonValue] = document.skip(_whitespace.many()).skip(end_of_input())


def loads(text: str, *, strict: bool = False) -> JsonValue:
    """Parse one JSON value from ``text``.

    Input after the value is ignored unless ``strict`` is set. Raises
    ``ParseError`` on failure, including values nested deeper than the
    interpreter's recursion limit allows.
    """
    parser = strict_document if strict else document
    try:
        return parser.parse(text)
    except RecursionError:
        start = len(text) - len(text.lstrip(WHITESPACE))
        raise ParseError("nesting too deep", start, retry=False) from None
