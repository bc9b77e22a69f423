"""
Verifies the code listings embedded in a Markdown document.
Lists, extracts, checks, or writes out the listings of a literate document.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from .config import CheckConfig, ConfigError, build_config
from .driver import build_exclusion_predicate, load_index, run
from .exceptions import ExtractError, ParseError
from .extractor import extract
from .filesystem import (
    get_max_file_size,
    get_max_line_length,
    resolve_document,
    resolve_output_path,
    write_atomic,
)
from .index import ListingIndex
from .models import ValidationStatus
from .parser import DocumentError
from .report import render_report
from .validator import ToolchainValidator

__all__ = ["cli"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

exclude_option = click.option(
    "--exclude",
    "exclude",
    multiple=True,
    metavar="PATTERN",
    help="Glob pattern of listing names to skip (repeatable)",
)
filepath_argument = click.argument("filepath", type=click.Path(exists=True, dir_okay=False))


def _prepare(filepath: str, **overrides: object) -> tuple[Path, CheckConfig, int]:
    """Resolve the effective configuration and validate the document path.

    Raises:
        click.BadParameter: If the path or the configuration is invalid.
        click.ClickException: If limits are misconfigured or exceeded.
    """
    try:
        config = build_config(Path(filepath).expanduser().absolute().parent, **overrides)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
        max_line_length = get_max_line_length(default=config.max_line_length)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        path = resolve_document(filepath, max_file_size)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    except IOError as error:
        raise click.ClickException(str(error)) from error

    return path, config, max_line_length


def _load(path: Path, config: CheckConfig, max_line_length: int) -> ListingIndex:
    try:
        return load_index(path, config, max_line_length)
    except DocumentError as error:
        raise click.ClickException(str(error)) from error
    except ParseError as error:
        raise click.ClickException(f"{path}: {error}") from error


@click.group()
@click.version_option()
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug)")
def cli(verbose: int = 0):
    """
    Verify the code listings embedded in Markdown documents.

    A listing is a code block whose first line is a header such as
    `lang: zig esc: none file: main.zig`, followed by a line of dashes.

    Examples:
        litcheck check proposal.md --exclude "*.prf"
    """
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("litcheck").setLevel(level)


@cli.command("ls")
@filepath_argument
@exclude_option
def list_command(filepath: str, exclude: tuple[str, ...] = ()):
    """
    Print the names of the file listings in FILEPATH, in document order.
    """
    path, config, max_line_length = _prepare(filepath)
    index = _load(path, config, max_line_length)
    excluded = build_exclusion_predicate(exclude)
    for name in index.list_names(lambda name: not excluded(name)):
        click.echo(name)


@cli.command("call")
@filepath_argument
@click.option("--file", "name", required=True, help="Name of the file listing to extract")
def call_command(filepath: str, name: str):
    """
    Print the source of one file listing, with placeholders expanded.

    Examples:
        litcheck call proposal.md --file=is_five.zig > is_five.zig
    """
    path, config, max_line_length = _prepare(filepath)
    index = _load(path, config, max_line_length)
    try:
        content = extract(index, name)
    except ExtractError as error:
        raise click.ClickException(str(error)) from error
    click.echo(content, nl=False)


@cli.command("check")
@filepath_argument
@click.option("--tool", help="Checker command; the listing path is appended")
@exclude_option
@click.option("--jobs", "-j", type=int, help="Number of listings checked in parallel")
@click.option("--timeout", type=float, help="Seconds allowed per checker invocation")
@click.option(
    "--workdir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory for transient listing files",
)
@click.option("--lenient", is_flag=True, help="Skip malformed listing headers instead of failing")
@click.pass_context
def check_command(
    ctx: click.Context,
    filepath: str,
    tool: str | None = None,
    exclude: tuple[str, ...] = (),
    jobs: int | None = None,
    timeout: float | None = None,
    workdir: str | None = None,
    lenient: bool = False,
):
    """
    Check every file listing in FILEPATH with an external toolchain.

    Prints one PASS or FAIL line per listing, the checker's diagnostics under
    each failure, and a summary. Exits with status 1 when any listing fails.

    Examples:
        litcheck check proposal.md --tool "zig fmt --ast-check" --jobs 4
    """
    path, config, max_line_length = _prepare(
        filepath,
        tool=tool,
        exclude=exclude,
        jobs=jobs,
        timeout=timeout,
        workdir=workdir,
        strict=False if lenient else None,
    )

    checker = ToolchainValidator(
        command=config.tool,
        timeout=config.timeout,
        workdir=Path(config.workdir) if config.workdir else None,
    )
    try:
        report = run(path, checker, config=config, max_line_length=max_line_length)
    except DocumentError as error:
        raise click.ClickException(str(error)) from error
    except ParseError as error:
        raise click.ClickException(f"{path}: {error}") from error

    for line in render_report(report):
        click.echo(line, nl=False)

    if report.overall_status is not ValidationStatus.PASS:
        ctx.exit(1)


@cli.command("tangle")
@filepath_argument
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(file_okay=False),
    help="Directory receiving the extracted files",
)
@exclude_option
def tangle_command(filepath: str, output: str, exclude: tuple[str, ...] = ()):
    """
    Write every file listing in FILEPATH below the output directory.
    """
    path, config, max_line_length = _prepare(filepath)
    index = _load(path, config, max_line_length)
    excluded = build_exclusion_predicate(exclude)
    output_dir = Path(output)

    for name in index.list_names(lambda name: not excluded(name)):
        try:
            target = resolve_output_path(output_dir, name)
            content = extract(index, name)
        except (ValueError, ExtractError) as error:
            raise click.ClickException(str(error)) from error

        try:
            write_atomic(target, content)
        except IOError as error:
            raise click.ClickException(str(error)) from error

        logger.info("Wrote %s", target)
        click.echo(name)


if __name__ == "__main__":
    cli()
