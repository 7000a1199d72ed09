"""
Command-line access to the md-editor core.
Parses, normalizes, and inspects markdown files without a UI.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

import click
from .config import ConfigError, build_config
from .document import document_stats, validate_document
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    normalize_filepath,
    read_markdown,
    write_markdown,
)
from .generator import document_to_dict, generate_markdown
from .parser import parse_markdown

__all__ = ["cli"]

logger = logging.getLogger(__name__)


def _load(filepath: str, max_file_size: int | None = None):
    """Resolve, check, and read a markdown file for a subcommand.

    Returns:
        tuple: The resolved path, its content, and the stat taken before reading.

    Raises:
        click.BadParameter: If the path or the configuration is invalid.
        click.ClickException: If the file is too large or cannot be read.
    """
    base_dir = Path.cwd().resolve()
    try:
        path = normalize_filepath(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(path.parent, max_file_size=max_file_size)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        limit = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        file_stat = collect_file_stat(path)
        enforce_file_size(file_stat, limit, path)
        content = read_markdown(path)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    logger.debug("Read %d characters from %s", len(content), path)
    return path, content, file_stat


@click.group()
@click.version_option(package_name="md-editor")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def cli(verbose: bool = False):
    """
    Inspect and normalize markdown files.

    Examples:
        md-editor parse README.md
        md-editor format --in-place README.md
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@cli.command("parse")
@click.option("--max-file-size", type=int, help="Maximum file size in bytes")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def parse_command(filepath: str, max_file_size: int | None = None):
    """Print the block structure of FILEPATH as JSON."""
    _, content, _ = _load(filepath, max_file_size)
    click.echo(json.dumps(document_to_dict(parse_markdown(content)), indent=2, ensure_ascii=False))


@cli.command("format")
@click.option("--in-place", "-i", is_flag=True, help="Rewrite the file instead of printing")
@click.option("--check", is_flag=True, help="Exit with status 1 if the file is not normalized")
@click.option("--max-file-size", type=int, help="Maximum file size in bytes")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def format_command(
    filepath: str, in_place: bool = False, check: bool = False, max_file_size: int | None = None
):
    """
    Normalize FILEPATH by parsing and regenerating it.

    Raises:
        click.ClickException: If `--check` finds differences or the file
            cannot be rewritten.
    """
    path, content, file_stat = _load(filepath, max_file_size)
    formatted = generate_markdown(parse_markdown(content)) + "\n"

    if check:
        if formatted != content:
            raise click.ClickException(f"{path.name} is not normalized.")
        return

    if not in_place:
        click.echo(formatted, nl=False)
        return

    if formatted == content:
        logger.debug("%s already normalized", path)
        return

    try:
        write_markdown(path, formatted, file_stat, warn=lambda message: click.echo(message, err=True))
    except IOError as error:
        raise click.ClickException(str(error)) from error


@cli.command("stats")
@click.option("--json", "as_json", is_flag=True, help="Print the statistics as JSON")
@click.option("--max-file-size", type=int, help="Maximum file size in bytes")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def stats_command(filepath: str, as_json: bool = False, max_file_size: int | None = None):
    """Print character, word, and block counts for FILEPATH."""
    _, content, _ = _load(filepath, max_file_size)
    stats = document_stats(content)

    if as_json:
        click.echo(json.dumps(asdict(stats), indent=2))
        return

    click.echo(f"Characters: {stats.character_count}")
    click.echo(f"Words: {stats.word_count}")
    click.echo(f"Paragraphs: {stats.paragraph_count}")
    click.echo(f"Headings: {stats.heading_count}")
    click.echo(f"Lists: {stats.list_count}")
    click.echo(f"Code blocks: {stats.code_block_count}")
    click.echo(f"Quotes: {stats.quote_count}")


@cli.command("validate")
@click.option("--max-file-size", type=int, help="Maximum file size in bytes")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def validate_command(filepath: str, max_file_size: int | None = None):
    """
    Report structural problems in FILEPATH.

    Warnings go to stderr; errors make the command exit with status 1.
    """
    path, content, _ = _load(filepath, max_file_size)
    result = validate_document(content)

    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)

    if not result.is_valid:
        raise click.ClickException("\n".join(str(error) for error in result.errors))

    click.echo(f"{path.name} is valid.")


if __name__ == "__main__":
    cli()
