"""Terminal colouring of rendered JSON."""

from pygments import highlight as _highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer


def colorize(text: str) -> str:
    """Return ``text`` with ANSI colour codes for a terminal."""
    colored = _highlight(text, JsonLexer(), TerminalFormatter())
    # pygments always terminates its output with a newline
    if not text.endswith("\n") and colored.endswith("\n"):
        colored = colored[:-1]
    return colored
