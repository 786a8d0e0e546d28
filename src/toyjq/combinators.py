"""Parser combinators over an immutable string cursor.

A ``Parser[T]`` wraps a function ``Cursor -> (Cursor, T)`` that raises
``ParseError`` on failure. Parsers hold no mutable state, so one value can
be built once and run against any number of inputs.

Backtracking is explicit. Every failure carries a ``retry`` flag:

* primitives fail with ``retry=True`` (nothing was committed);
* sequencing (``bind``/``then``/``and_``/``skip``) forces ``retry=False`` on a
  failure of its second half once the first half has consumed input;
* ``or_`` only tries its alternative when the failure is retryable;
* ``attempt`` turns any failure back into a retryable one, reported at the
  offset where the wrapped parser started.

Recursive grammars reference themselves through ``lazy`` or the ``*_lazy``
combinators, which defer building the right-hand parser until it runs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from toyjq.cursor import Cursor
from toyjq.errors import ParseError

T = TypeVar("T")
U = TypeVar("U")

Step = tuple[Cursor, T]

_END_OF_INPUT = "unexpected end of input"


def _sequenced(start: Cursor, middle: Cursor, error: ParseError) -> ParseError:
    """Failure of the second half of a sequence that began at ``start``."""
    if middle.pos == start.pos:
        return error
    return error.with_retry(False)


class Parser(Generic[T]):
    """A composable parsing computation."""

    __slots__ = ("_fn", "name")

    def __init__(self, fn: Callable[[Cursor], Step[T]], name: str = "") -> None:
        self._fn = fn
        self.name = name

    def __repr__(self) -> str:
        return f"<Parser {self.name or self._fn.__name__}>"

    # ── Execution ──────────────────────────────────────────────

    def run(self, cursor: Cursor) -> Step[T]:
        """Run against ``cursor``; return the residual cursor and value."""
        return self._fn(cursor)

    def parse(self, text: str) -> T:
        """Run from the start of ``text`` and return the value."""
        return run(self, text)

    # ── Mapping ────────────────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> Parser[U]:
        def mapped(cursor: Cursor) -> Step[U]:
            rest, value = self._fn(cursor)
            return rest, f(value)

        return Parser(mapped, self.name)

    def map_to(self, value: U) -> Parser[U]:
        """Replace a successful result with ``value``."""
        return self.map(lambda _: value)

    # ── Sequencing ─────────────────────────────────────────────

    def bind(self, f: Callable[[T], Parser[U]]) -> Parser[U]:
        """Feed this parser's value to ``f`` and run the parser it returns."""
        def bound(cursor: Cursor) -> Step[U]:
            rest, value = self._fn(cursor)
            try:
                return f(value)._fn(rest)
            except ParseError as e:
                raise _sequenced(cursor, rest, e) from None

        return Parser(bound, self.name)

    def then(self, other: Parser[U]) -> Parser[U]:
        """Run ``other`` after this parser, keeping only its value."""
        def seq(cursor: Cursor) -> Step[U]:
            rest, _ = self._fn(cursor)
            try:
                return other._fn(rest)
            except ParseError as e:
                raise _sequenced(cursor, rest, e) from None

        return Parser(seq, other.name)

    def then_lazy(self, thunk: Callable[[], Parser[U]]) -> Parser[U]:
        return self.bind(lambda _: thunk())

    def and_(self, other: Parser[U]) -> Parser[tuple[T, U]]:
        """Run both parsers and pair their values."""
        return self.and_lazy(lambda: other)

    def and_lazy(self, thunk: Callable[[], Parser[U]]) -> Parser[tuple[T, U]]:
        def pair(cursor: Cursor) -> Step[tuple[T, U]]:
            rest, first = self._fn(cursor)
            try:
                rest2, second = thunk()._fn(rest)
            except ParseError as e:
                raise _sequenced(cursor, rest, e) from None
            return rest2, (first, second)

        return Parser(pair, self.name)

    def skip(self, other: Parser[Any]) -> Parser[T]:
        """Require ``other`` to follow, keeping this parser's value."""
        def skipped(cursor: Cursor) -> Step[T]:
            rest, value = self._fn(cursor)
            try:
                rest2, _ = other._fn(rest)
            except ParseError as e:
                raise _sequenced(cursor, rest, e) from None
            return rest2, value

        return Parser(skipped, self.name)

    # ── Alternation ────────────────────────────────────────────

    def or_(self, other: Parser[T]) -> Parser[T]:
        """Try ``other`` from the same position on a retryable failure."""
        return self.or_lazy(lambda: other)

    def or_lazy(self, thunk: Callable[[], Parser[T]]) -> Parser[T]:
        def alternative(cursor: Cursor) -> Step[T]:
            try:
                return self._fn(cursor)
            except ParseError as e:
                if not e.retry:
                    raise
            return thunk()._fn(cursor)

        return Parser(alternative, self.name)

    def attempt(self) -> Parser[T]:
        """Make any failure retryable, reported where this parser started."""
        def attempted(cursor: Cursor) -> Step[T]:
            try:
                return self._fn(cursor)
            except ParseError as e:
                raise e.with_retry(True, cursor.pos) from None

        return Parser(attempted, self.name)

    def or_not(self) -> Parser[T | None]:
        """Optional phrase: ``None`` without consuming input on any failure."""
        def optional(cursor: Cursor) -> Step[T | None]:
            try:
                return self._fn(cursor)
            except ParseError:
                return cursor, None

        return Parser(optional, self.name)

    # ── Repetition ─────────────────────────────────────────────

    def many(self) -> Parser[list[T]]:
        """Zero or more repetitions, ending at the first retryable failure."""
        def repeated(cursor: Cursor) -> Step[list[T]]:
            values: list[T] = []
            while True:
                try:
                    rest, value = self._fn(cursor)
                except ParseError as e:
                    if not e.retry:
                        raise
                    return cursor, values
                values.append(value)
                if rest.pos == cursor.pos:
                    return rest, values
                cursor = rest

        return Parser(repeated, self.name)

    def sep_by(self, delimiter: Parser[Any]) -> Parser[list[T]]:
        """Possibly empty, ``delimiter``-separated sequence.

        Only a retryable failure of the first element means "empty". After a
        delimiter an element is mandatory: its failure propagates committed,
        so a trailing delimiter is an error.
        """
        def separated(cursor: Cursor) -> Step[list[T]]:
            try:
                cursor, first = self._fn(cursor)
            except ParseError as e:
                if not e.retry:
                    raise
                return cursor, []
            values = [first]
            while True:
                try:
                    after_delim, _ = delimiter._fn(cursor)
                except ParseError as e:
                    if not e.retry:
                        raise
                    return cursor, values
                try:
                    cursor, value = self._fn(after_delim)
                except ParseError as e:
                    raise e.with_retry(False) from None
                values.append(value)

        return Parser(separated, self.name)

    def surrounded_by(self, filler: Parser[Any]) -> Parser[T]:
        """Skip ``filler`` repetitions on both sides, as one retryable unit."""
        padding = filler.many()
        return padding.then(self).skip(padding).attempt()

    def surrounded_by_spaces(self) -> Parser[T]:
        return self.surrounded_by(one_char(" "))


# ── Primitives ─────────────────────────────────────────────────


def succeed(value: T) -> Parser[T]:
    """Always succeed with ``value`` without consuming input."""
    return Parser(lambda cursor: (cursor, value), "succeed")


def fail(message: str) -> Parser[Any]:
    """Always fail (retryable) at the current position."""
    def failing(cursor: Cursor) -> Step[Any]:
        raise ParseError(message, cursor.pos)

    return Parser(failing, "fail")


def literal(expected: str) -> Parser[str]:
    """Match ``expected`` exactly."""
    def matching(cursor: Cursor) -> Step[str]:
        if cursor.startswith(expected):
            return cursor.advance(len(expected)), expected
        if cursor.at_end:
            raise ParseError(_END_OF_INPUT, cursor.pos)
        actual = cursor.take(len(expected))
        raise ParseError(f"expected `{expected}` but found `{actual}`", cursor.pos)

    return Parser(matching, f"literal {expected!r}")


def one_char(expected: str) -> Parser[str]:
    """Match the single character ``expected``."""
    if len(expected) != 1:
        raise ValueError(f"one_char expects a single character, got {expected!r}")
    return literal(expected)


def satisfy(predicate: Callable[[str], bool], expected: str) -> Parser[str]:
    """Match one character accepted by ``predicate``."""
    def matching(cursor: Cursor) -> Step[str]:
        if cursor.at_end:
            raise ParseError(_END_OF_INPUT, cursor.pos)
        head = cursor.take(1)
        if predicate(head):
            return cursor.advance(1), head
        raise ParseError(f"expected {expected} but found `{head}`", cursor.pos)

    return Parser(matching, expected)


def char_in(chars: str) -> Parser[str]:
    return satisfy(lambda c: c in chars, f"one of `{chars}`")


def char_not_in(chars: str) -> Parser[str]:
    return satisfy(lambda c: c not in chars, f"any character except `{chars}`")


def scan_until(delimiter: str) -> Parser[str]:
    """Consume input up to, not including, the next ``delimiter``."""
    def scanning(cursor: Cursor) -> Step[str]:
        end = -1 if cursor.at_end else cursor.find(delimiter)
        if end < 0:
            raise ParseError(_END_OF_INPUT, cursor.pos)
        return cursor.seek(end), cursor.body[cursor.pos:end]

    return Parser(scanning, f"scan_until {delimiter!r}")


def end_of_input() -> Parser[None]:
    def at_end(cursor: Cursor) -> Step[None]:
        if not cursor.at_end:
            raise ParseError(
                f"expected end of input but found `{cursor.take(10)}`", cursor.pos,
            )
        return cursor, None

    return Parser(at_end, "end_of_input")


def lazy(thunk: Callable[[], Parser[T]]) -> Parser[T]:
    """Refer to a parser that is only built when this one runs."""
    return Parser(lambda cursor: thunk()._fn(cursor), "lazy")


def or_from(parsers: Iterable[Parser[T]]) -> Parser[T]:
    """Ordered choice over ``parsers``, each one backtracking as a unit."""
    alternatives = [p.attempt() for p in parsers]
    if not alternatives:
        raise ValueError("or_from needs at least one alternative")
    result = alternatives[0]
    for alternative in alternatives[1:]:
        result = result.or_(alternative)
    return result


def run(parser: Parser[T], text: str) -> T:
    """Parse ``text`` from its start, discarding the residual input."""
    _, value = parser.run(Cursor(text))
    return value
