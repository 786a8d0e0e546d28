"""Tests for the cursor and the parser combinators."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from toyjq.combinators import (
    Parser,
    char_in,
    char_not_in,
    end_of_input,
    fail,
    lazy,
    literal,
    one_char,
    or_from,
    run,
    scan_until,
    succeed,
)
from toyjq.cursor import Cursor
from toyjq.errors import ParseError


def failure(parser: Parser, text: str, pos: int = 0) -> ParseError:
    """Helper: run ``parser`` expecting a failure and return it."""
    with pytest.raises(ParseError) as exc:
        parser.run(Cursor(text, pos))
    return exc.value


# --- A small expression grammar exercising recursion ---


@dataclass(frozen=True)
class Add:
    lhs: object
    rhs: object


def _to_int(parts) -> int:
    (negate, head), tail = parts
    return int(("-" if negate else "") + head + "".join(tail))


digit = or_from(one_char(c) for c in "0123456789")
number = one_char("0").map_to(0).attempt().or_(
    one_char("-").or_not()
    .and_(or_from(one_char(c) for c in "123456789"))
    .and_(digit.many())
    .map(_to_int)
)
add = one_char("(").surrounded_by_spaces().then_lazy(
    lambda: expr.and_lazy(
        lambda: one_char("+").surrounded_by_spaces().then(expr)
    ).map(lambda pair: Add(*pair))
).skip(one_char(")"))
expr = add.attempt().or_lazy(lambda: number)


class TestCursor:
    def test_advance_returns_new_cursor(self):
        cursor = Cursor("hello")
        moved = cursor.advance(2)
        assert moved.pos == 2
        assert cursor.pos == 0
        assert moved.take(3) == "llo"

    def test_advance_clamps_to_end(self):
        assert Cursor("hi").advance(5).pos == 2

    def test_at_end(self):
        assert Cursor("hi", 2).at_end
        assert not Cursor("hi", 1).at_end
        assert Cursor("").at_end

    def test_take_is_bounded(self):
        assert Cursor("abc", 1).take(5) == "bc"

    def test_offset_out_of_range(self):
        with pytest.raises(ValueError):
            Cursor("abc", 4)
        with pytest.raises(ValueError):
            Cursor("abc", -1)

    def test_cursors_compare_by_value(self):
        assert Cursor("abc", 1) == Cursor("abc").advance()


class TestPrimitives:
    def test_literal(self):
        assert literal("foo").parse("fooo") == "foo"

    def test_literal_consumes(self):
        rest, value = literal("foo").run(Cursor("foobar"))
        assert value == "foo"
        assert rest.pos == 3

    def test_literal_mismatch(self):
        err = failure(literal("foo"), "xbar", 1)
        assert err.retry is True
        assert err.pos == 1
        assert err.message == "expected `foo` but found `bar`"

    def test_literal_at_end(self):
        err = failure(literal("foo"), "")
        assert err.retry is True
        assert err.message == "unexpected end of input"

    def test_literal_short_input(self):
        err = failure(literal("true"), "tru")
        assert err.retry is True
        assert "`tru`" in err.message

    def test_one_char(self):
        assert one_char("f").parse("foo") == "f"

    def test_one_char_rejects_strings(self):
        with pytest.raises(ValueError):
            one_char("ab")

    def test_char_in(self):
        assert char_in("abc").parse("cab") == "c"
        err = failure(char_in("abc"), "x")
        assert err.retry is True

    def test_char_not_in(self):
        assert char_not_in('"').parse("x") == "x"
        assert failure(char_not_in('"'), '"').pos == 0
        assert failure(char_not_in('"'), "").message == "unexpected end of input"

    def test_scan_until(self):
        assert scan_until("!").parse("foo bar!") == "foo bar"

    def test_scan_until_leaves_delimiter(self):
        rest, value = scan_until("--").run(Cursor("ab--cd"))
        assert value == "ab"
        assert rest.pos == 2

    def test_scan_until_delimiter_first(self):
        assert scan_until("!").parse("!x") == ""

    def test_scan_until_missing_delimiter(self):
        err = failure(scan_until("!"), "abc!def", 4)
        assert err.retry is True
        assert err.pos == 4

    def test_succeed(self):
        rest, value = succeed(42).run(Cursor("abc", 1))
        assert value == 42
        assert rest.pos == 1

    def test_fail(self):
        err = failure(fail("failed"), "abc", 2)
        assert err.message == "failed"
        assert err.pos == 2
        assert err.retry is True

    def test_end_of_input(self):
        assert end_of_input().parse("") is None
        assert failure(end_of_input(), "x").retry is True


class TestMapping:
    def test_map(self):
        assert succeed(42).map(lambda x: x + 1).parse("") == 43

    def test_map_to(self):
        assert succeed(42).map_to(1).parse("") == 1

    def test_map_preserves_failure(self):
        err = failure(literal("a").map(str.upper), "b")
        assert (err.retry, err.pos) == (True, 0)


class TestSequencing:
    def test_bind(self):
        assert succeed("f").bind(one_char).parse("foo") == "f"

    def test_then(self):
        assert one_char("[").then(literal("foo")).parse("[foo]") == "foo"

    def test_then_lazy(self):
        assert one_char("[").then_lazy(lambda: literal("foo")).parse("[foo]") == "foo"

    def test_and(self):
        assert one_char("[").and_(literal("foo")).parse("[foo]") == ("[", "foo")

    def test_and_lazy(self):
        parser = one_char("[").and_lazy(lambda: literal("foo"))
        assert parser.parse("[foo]") == ("[", "foo")

    def test_skip(self):
        assert literal("foo").skip(one_char(";")).parse("foo;") == "foo"

    def test_skip_requires_second(self):
        err = failure(literal("foo").skip(one_char(";")), "foo.")
        assert (err.retry, err.pos) == (False, 3)

    @pytest.mark.parametrize("combine", [
        lambda p, q: p.then(q),
        lambda p, q: p.and_(q),
        lambda p, q: p.skip(q),
        lambda p, q: p.bind(lambda _: q),
        lambda p, q: p.then_lazy(lambda: q),
        lambda p, q: p.and_lazy(lambda: q),
    ])
    def test_commits_after_consuming(self, combine):
        err = failure(combine(one_char("["), literal("x")), "[y")
        assert err.retry is False
        assert err.pos == 1

    @pytest.mark.parametrize("combine", [
        lambda p, q: p.then(q),
        lambda p, q: p.and_(q),
        lambda p, q: p.skip(q),
        lambda p, q: p.bind(lambda _: q),
    ])
    def test_keeps_flag_without_consuming(self, combine):
        err = failure(combine(succeed(None), literal("x")), "y")
        assert err.retry is True

    def test_inner_commitment_survives_empty_prefix(self):
        inner = literal("a").then(literal("b"))
        err = failure(succeed(0).then(inner), "ac")
        assert (err.retry, err.pos) == (False, 1)

    def test_first_failure_unchanged(self):
        err = failure(literal("a").then(literal("b")), "x")
        assert (err.retry, err.pos) == (True, 0)


class TestAlternation:
    def test_or(self):
        assert literal("foo").or_(literal("bar")).parse("bar") == "bar"

    def test_or_lazy(self):
        assert literal("foo").or_lazy(lambda: literal("bar")).parse("bar") == "bar"

    def test_or_keeps_first_success(self):
        assert literal("b").or_(literal("bar")).parse("bar") == "b"

    def test_or_does_not_retry_committed(self):
        parser = literal("f").then(literal("oo")).or_(literal("fa"))
        err = failure(parser, "fa")
        assert (err.retry, err.pos) == (False, 1)

    def test_or_lazy_not_built_when_first_succeeds(self):
        def explode():
            raise AssertionError("alternative must not be built")

        assert literal("a").or_lazy(explode).parse("a") == "a"

    def test_attempt_enables_backtracking(self):
        parser = literal("f").then(literal("oo")).attempt().or_(literal("fa"))
        assert parser.parse("fa") == "fa"

    def test_attempt_reports_start_position(self):
        err = failure(literal("f").then(literal("oo")).attempt(), "xfa", 1)
        assert (err.retry, err.pos) == (True, 1)

    def test_or_backtracks_to_starting_cursor(self):
        parser = literal("ab").then(literal("c")).attempt().or_(literal("abd"))
        rest, value = parser.run(Cursor("abd!"))
        assert value == "abd"
        assert rest.pos == 3

    def test_or_not(self):
        parser = one_char("-").or_not().and_(literal("123"))
        assert parser.parse("-123") == ("-", "123")
        assert parser.parse("123") == (None, "123")

    def test_or_not_absorbs_committed_failure(self):
        rest, value = literal("a").then(literal("b")).or_not().run(Cursor("ac"))
        assert value is None
        assert rest.pos == 0

    def test_or_from(self):
        assert or_from(one_char(c) for c in "abcdef").parse("fff") == "f"

    def test_or_from_backtracks_each_alternative(self):
        parser = or_from([literal("f").then(literal("oo")), literal("fa")])
        assert parser.parse("fa") == "fa"

    def test_or_from_empty(self):
        with pytest.raises(ValueError):
            or_from([])


class TestRepetition:
    def test_many(self):
        assert literal("foo").many().parse("foofoofoo") == ["foo", "foo", "foo"]

    def test_many_zero(self):
        rest, value = literal("foo").many().run(Cursor("bar"))
        assert value == []
        assert rest.pos == 0

    def test_many_propagates_committed(self):
        err = failure(literal("a").then(literal("b")).many(), "ababac")
        assert (err.retry, err.pos) == (False, 5)

    def test_many_stops_without_progress(self):
        assert succeed(1).many().parse("x") == [1]

    def test_sep_by(self):
        parser = literal("foo").sep_by(literal(", "))
        assert parser.parse("foo, foo, foo") == ["foo", "foo", "foo"]

    def test_sep_by_empty(self):
        assert literal("foo").sep_by(literal(",")).parse("") == []

    def test_sep_by_stops_at_missing_delimiter(self):
        rest, value = literal("foo").sep_by(literal(",")).run(Cursor("foo,foo;"))
        assert value == ["foo", "foo"]
        assert rest.pos == 7

    def test_sep_by_trailing_delimiter(self):
        err = failure(literal("foo").sep_by(literal(", ")), "foo, ")
        assert (err.retry, err.pos) == (False, 5)

    def test_sep_by_committed_first_element(self):
        err = failure(literal("a").then(literal("b")).sep_by(literal(",")), "ac")
        assert (err.retry, err.pos) == (False, 1)

    def test_surrounded_by_spaces(self):
        rest, value = one_char("x").surrounded_by_spaces().run(Cursor("  x  y"))
        assert value == "x"
        assert rest.pos == 5

    def test_surrounded_by_spaces_is_retryable(self):
        err = failure(one_char("x").surrounded_by_spaces(), "  y")
        assert (err.retry, err.pos) == (True, 0)

    def test_surrounded_by(self):
        parser = one_char(",").surrounded_by(char_in(" \n"))
        assert parser.parse("\n , \n") == ","


class TestRecursion:
    def test_lazy_nesting(self):
        depth = lazy(lambda: parens)
        parens = one_char("(").then(depth).skip(one_char(")")).map(
            lambda n: n + 1
        ).or_(succeed(0))
        assert parens.parse("((()))") == 3
        assert parens.parse("") == 0

    def test_numbers(self):
        assert number.parse("0") == 0
        assert number.parse("1") == 1
        assert number.parse("123") == 123
        assert number.parse("-999123") == -999123

    def test_expressions(self):
        assert expr.parse("-987654321") == -987654321
        assert expr.parse("(1 + 2)") == Add(1, 2)
        assert expr.parse("((1 + 2) + ((3 + 4) + 5))") == Add(
            Add(1, 2), Add(Add(3, 4), 5),
        )

    def test_unbalanced_addition_is_committed(self):
        err = failure(add, "(1 + 2")
        assert (err.retry, err.pos) == (False, 6)

    def test_attempt_rewinds_unbalanced_expression(self):
        err = failure(expr, "(1 + 2")
        assert (err.retry, err.pos) == (True, 0)


class TestRun:
    def test_run(self):
        assert run(literal("ab"), "abc") == "ab"

    def test_parser_is_reusable(self):
        parser = literal("a").many()
        assert parser.parse("aa") == ["a", "a"]
        assert parser.parse("aaa") == ["a", "a", "a"]
        assert parser.parse("aa") == ["a", "a"]

    def test_same_failure_each_run(self):
        parser = literal("a").then(literal("b"))
        assert failure(parser, "ac") == failure(parser, "ac")

    def test_repr_names_parser(self):
        assert "literal" in repr(literal("x"))
