# -*- encoding: utf-8 -*-
# @File   : cli.py
# @Time   : 2024/10/12 22:41:07
# @Author : Kariko Lin

"""Command line wrapper: read a file into memory, `parse()`, `encode()`."""

import logging
from pathlib import Path

import typer

from . import __version__
from .model import DEFAULT_SECTION
from .parser import IniFileParser, ParseError

app = typer.Typer(
    name="flatini",
    help="Check, normalize and query flat INI files.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"flatini {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log what is going on."),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.",
        callback=_version_callback, is_eager=True),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='[%(asctime)s] %(levelname)s: %(message)s')


# what reading / writing a file may go wrong with, besides bugs.
_FILE_ERRORS = (ParseError, OSError, UnicodeError, LookupError)


@app.command("check")
def check_cmd(
    files: list[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, help="INI files to check."),
    encoding: str | None = typer.Option(
        None, "--encoding", "-e", help="Guessed when omitted."),
) -> None:
    """Parse every file, report the first error of each."""
    failed = 0
    for i in files:
        try:
            doc = IniFileParser(i, encoding).read()
        except _FILE_ERRORS as e:
            typer.echo(f"{i}: {e}", err=True)
            failed += 1
            continue
        typer.echo(f"{i}: OK ({len(doc)} sections)")
    if failed:
        raise typer.Exit(1)


@app.command("format")
def format_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Defaults to rewriting FILE in place."),
    bom: bool | None = typer.Option(
        None, "--bom/--no-bom", help="Keep the original BOM when omitted."),
    encoding: str | None = typer.Option(None, "--encoding", "-e"),
) -> None:
    """Rewrite FILE sorted, without comments and blank lines."""
    try:
        reader = IniFileParser(file, encoding, bom=bom)
        doc = reader.read()
        if output is None:
            reader.write(doc)
        else:
            keep = reader.had_bom if bom is None else bom
            IniFileParser(output, reader.encoding, bom=keep).write(doc)
    except _FILE_ERRORS as e:
        typer.echo(f"{file}: {e}", err=True)
        raise typer.Exit(1)


@app.command("get")
def get_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False),
    key: str = typer.Argument(...),
    section: str = typer.Option(
        DEFAULT_SECTION, "--section", "-s",
        help="Defaults to the pairs before any header."),
    encoding: str | None = typer.Option(None, "--encoding", "-e"),
) -> None:
    """Print the value of KEY."""
    try:
        doc = IniFileParser(file, encoding).read()
    except _FILE_ERRORS as e:
        typer.echo(f"{file}: {e}", err=True)
        raise typer.Exit(1)
    if section not in doc or key not in doc[section]:
        typer.echo(f"[{section}] {key}: not found", err=True)
        raise typer.Exit(1)
    typer.echo(doc[section][key])
