"""toyjq command line interface."""

from __future__ import annotations

import logging
from typing import IO

import click

from toyjq import __version__
from toyjq.config import ToyjqConfig, discover_config
from toyjq.errors import ConfigError, DiagnosticRenderer, ParseError, diagnostic_for
from toyjq.grammar import loads
from toyjq.printer import dumps
from toyjq.source import SourceText
from toyjq.values import JsonArray, JsonNull, JsonObject, JsonValue

logger = logging.getLogger(__name__)


def _load_config() -> ToyjqConfig:
    try:
        return discover_config()
    except ConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


def _read_source(file: IO[str]) -> SourceText:
    name = str(getattr(file, "name", "<stdin>"))
    content = file.read()
    logger.debug("read %d characters from %s", len(content), name)
    return SourceText(content, name)


def _explain(error: ParseError, source: SourceText, *, color: bool) -> None:
    renderer = DiagnosticRenderer(source, color=color)
    click.echo(renderer.render(diagnostic_for(error, source)), err=True, color=color)


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="toyjq")
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline details to stderr.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Parse JSON and pretty-print it to fit a line width.

    Without a sub-command, formats standard input.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(levelname)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        _format(click.get_text_stream("stdin"))


@main.command(name="format")
@click.argument("file", type=click.File("r"), default="-")
@click.option("--width", "-w", type=click.IntRange(min=0), default=None,
              help="Target line width (default 80).")
@click.option("--indent", type=click.IntRange(min=0), default=None,
              help="Spaces per nesting level (default 2).")
@click.option("--color/--no-color", default=None, help="Colorize the output.")
@click.option("--strict", is_flag=True,
              help="Reject input after the JSON value.")
@click.option("--explain", is_flag=True, help="Show a diagnostic on stderr on failure.")
def format_cmd(
    file: IO[str],
    width: int | None,
    indent: int | None,
    color: bool | None,
    strict: bool,
    explain: bool,
) -> None:
    """Pretty-print one JSON value.

    A parse failure prints ERROR and the error on stdout and exits normally.
    """
    _format(file, width, indent, color, strict, explain)


def _format(
    file: IO[str],
    width: int | None = None,
    indent: int | None = None,
    color: bool | None = None,
    strict: bool = False,
    explain: bool = False,
) -> None:
    config = _load_config()
    width = config.format.width if width is None else width
    indent = config.format.indent if indent is None else indent
    color = config.output.color if color is None else color
    strict = strict or config.output.strict

    source = _read_source(file)
    try:
        value = loads(source.content, strict=strict)
    except ParseError as e:
        logger.debug("parse failed: %r", e)
        click.echo("ERROR")
        click.echo(repr(e))
        if explain:
            _explain(e, source, color=color)
        return

    logger.debug("rendering at width %d, indent %d", width, indent)
    output = dumps(value, width, indent)
    if color:
        from toyjq.highlight import colorize

        output = colorize(output)
    click.echo(output, color=color)


@main.command()
@click.argument("file", type=click.File("r"), default="-")
@click.option("--strict", is_flag=True, help="Reject input after the JSON value.")
def check(file: IO[str], strict: bool) -> None:
    """Validate one JSON value without printing it."""
    config = _load_config()
    source = _read_source(file)
    try:
        loads(source.content, strict=strict or config.output.strict)
    except ParseError as e:
        _explain(e, source, color=config.output.color)
        raise SystemExit(1)
    click.echo(f"ok {source.name}")


@main.command()
@click.argument("file", type=click.File("r"), default="-")
def view(file: IO[str]) -> None:
    """View the parsed value tree of a JSON document."""
    config = _load_config()
    source = _read_source(file)
    try:
        value = loads(source.content, strict=config.output.strict)
    except ParseError as e:
        _explain(e, source, color=config.output.color)
        raise SystemExit(1)
    _dump_value(value, 0)


def _dump_value(value: JsonValue, depth: int, label: str = "") -> None:
    """Print a readable value tree."""
    indent = "  " * depth
    name = type(value).__name__

    if isinstance(value, JsonArray):
        suffix = "" if value.items else ": []"
        click.echo(f"{indent}{label}{name}{suffix}")
        for item in value.items:
            _dump_value(item, depth + 1)
    elif isinstance(value, JsonObject):
        suffix = "" if value.members else ": {}"
        click.echo(f"{indent}{label}{name}{suffix}")
        for key, item in value.members:
            _dump_value(item, depth + 1, f"{key!r} -> ")
    elif isinstance(value, JsonNull):
        click.echo(f"{indent}{label}{name}")
    else:
        click.echo(f"{indent}{label}{name}: {value.value!r}")
