"""toyjq: parser combinators, a Wadler-style pretty printer and a JSON formatter."""

from toyjq.combinators import Parser, run
from toyjq.cursor import Cursor
from toyjq.doc import Doc, Flatable, Literal, Newline, Text, render
from toyjq.errors import ParseError
from toyjq.grammar import loads
from toyjq.printer import dumps, to_doc

__version__ = "0.1.0"

__all__ = [
    "Cursor",
    "Doc",
    "Flatable",
    "Literal",
    "Newline",
    "ParseError",
    "Parser",
    "Text",
    "dumps",
    "loads",
    "render",
    "run",
    "to_doc",
]
