"""CLI entry point for org-outline."""

import difflib
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from org_outline.config import OutlineConfig, default_config_path, load_config
from org_outline.document import Heading, OrgDocument
from org_outline.exceptions import ConfigError, HeadingIndexError, UnknownFlagError
from org_outline.exporter import export
from org_outline.markup import spans_to_text, tokenize
from org_outline.parser import parse
from org_outline.query import FLAG_OPPOSITES, query_inherited_flag
from org_outline.utils.logging import configure_logging, get_logger, reset_logging


logger = get_logger(__name__)
console = Console()


def read_org_file(path: Path) -> str:
    """Read an org file without newline translation, so CR bytes survive."""
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def parse_file(path: Path, config: OutlineConfig) -> tuple[str, OrgDocument]:
    """Read and parse an org file, logging its parse warnings.

    Returns:
        Tuple of (file text, parsed document)
    """
    text = read_org_file(path)
    document = parse(text, config)

    for warning in document.warnings:
        logger.warning(warning.kind, file=str(path), line_number=warning.line_number, reason=warning.message)
    logger.debug(
        "document_parsed",
        file=str(path),
        headings=document.heading_count,
        keyword_sets=len(document.todo_keyword_sets),
        warnings=len(document.warnings),
    )
    return text, document


def _heading_label(index: int, heading: Heading) -> Text:
    """One-line rich label for a heading in the tree view."""
    label = Text(f"{index} ", style="dim")
    if heading.keyword:
        label.append(f"{heading.keyword} ", style="bold magenta")
    if heading.priority:
        label.append(f"[#{heading.priority}] ", style="yellow")
    label.append(spans_to_text(heading.title_markup))
    if heading.tags:
        label.append(f" :{':'.join(heading.tags)}:", style="cyan")
    for item in heading.planning.items:
        label.append(f"  {item.type} {item.timestamp.render()}", style="green")
    return label


@click.group()
@click.version_option(version="0.1.0", prog_name="org-outline")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/org-outline/config.yaml)",
)
@click.option(
    "--log-file",
    default=None,
    help="Log file, or - for stderr (default: ~/.cache/org-outline/logs/org-outline.log)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_file: Optional[str]):
    """org-outline: Parse, inspect and round-trip org-mode files."""
    configure_logging(log_file)
    ctx.call_on_close(reset_logging)

    try:
        ctx.obj = load_config(config_path)
    except ConfigError as e:
        logger.error("config_invalid", path=e.path, error=e.message)
        raise click.ClickException(str(e))

    logger.info("config_loaded", path=str(config_path or default_config_path()), command=ctx.invoked_subcommand)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def check(config: OutlineConfig, files: tuple[Path, ...]):
    """Check that each FILE exports back to exactly its own text."""
    failed = 0

    for path in files:
        original, document = parse_file(path, config)
        exported = export(document, config)
        logger.debug("document_exported", file=str(path), length=len(exported), unchanged=exported == original)

        for warning in document.warnings:
            console.print(
                f"[yellow]{escape(str(path))}:{warning.line_number}: {warning.kind}: {escape(warning.message)}[/yellow]",
                soft_wrap=True,
            )

        if exported == original:
            console.print(f"[green]ok[/green]     {escape(str(path))} ({document.heading_count} headings)", soft_wrap=True)
            continue

        failed += 1
        console.print(f"[red]FAILED[/red] {escape(str(path))}", soft_wrap=True)
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            exported.splitlines(keepends=True),
            fromfile=str(path),
            tofile=f"{path} (exported)",
        )
        click.echo("".join(diff), nl=False)

    logger.info("check_command_completed", files=len(files), failed=failed)
    if failed:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def tree(config: OutlineConfig, file: Path):
    """Show the heading tree of FILE."""
    _, document = parse_file(file, config)
    root = Tree(Text(str(file), style="bold"))

    index = 0

    def add(branch: Tree, heading: Heading) -> None:
        nonlocal index
        node = branch.add(_heading_label(index, heading))
        index += 1
        for child in heading.children:
            add(node, child)

    for heading in document.headings:
        add(root, heading)

    console.print(root)


@cli.command()
@click.argument("line")
def tokens(line: str):
    """Show the inline markup spans of LINE."""
    table = Table(title="Inline spans")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Source")

    for n, span in enumerate(tokenize(line)):
        table.add_row(str(n), type(span).__name__, Text(span.source))

    console.print(table)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("index", type=int)
@click.option(
    "--name",
    "flag_name",
    default="nologrepeat",
    show_default=True,
    help=f"Logging flag ({', '.join(FLAG_OPPOSITES)})",
)
@click.pass_obj
def flag(config: OutlineConfig, file: Path, index: int, flag_name: str):
    """Print whether a logging flag is in effect for heading INDEX of FILE."""
    _, document = parse_file(file, config)

    try:
        enabled = query_inherited_flag(document, index, flag_name)
    except (HeadingIndexError, UnknownFlagError) as e:
        logger.error("flag_query_failed", file=str(file), index=index, flag=flag_name, error=str(e))
        raise click.ClickException(str(e))

    click.echo("true" if enabled else "false")


if __name__ == "__main__":
    cli()
