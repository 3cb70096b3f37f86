"""indexcheck CLI — verify deployed indexes against firestore.indexes.json."""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from indexcheck import __version__
from indexcheck.config import Settings
from indexcheck.errors import IndexCheckError

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    log = logging.getLogger("indexcheck")
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in log.handlers):
        log.addHandler(RichHandler(console=err_console, show_path=False))


def _fail(error: Exception, to_stderr: bool = False) -> None:
    out = err_console if to_stderr else console
    out.print(f"[red]Error:[/] {escape(str(error))}", soft_wrap=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def main():
    """indexcheck — declarative index verification.

    Compare the composite indexes declared in an index specification file
    with the indexes actually deployed to an environment.
    """


# ── Verify ───────────────────────────────────────────────────────────


@main.command()
@click.argument("environment")
@click.argument("indexes_path", required=False)
@click.option("--firebaserc", default=None, help="Path to the .firebaserc alias file")
@click.option(
    "--snapshot",
    "-s",
    default=None,
    help="JSON index listing captured from the environment (env: INDEXCHECK_SNAPSHOT)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for observed state",
)
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
@click.option("--verbose", "-v", is_flag=True, help="Log debug details to stderr")
def verify(
    environment: str,
    indexes_path: str | None,
    firebaserc: str | None,
    snapshot: str | None,
    timeout: float | None,
    output_format: str,
    verbose: bool,
):
    """Verify that ENVIRONMENT serves every index declared in INDEXES_PATH.

    ENVIRONMENT is a .firebaserc alias (or a project ID listed there).
    INDEXES_PATH defaults to firestore.indexes.json. Exits 0 when all
    expected indexes are deployed and ready and nothing unexpected exists.
    """
    from indexcheck.fetcher import SnapshotStateFetcher, UnconfiguredStateFetcher
    from indexcheck.pipeline import IndexVerifier
    from indexcheck.reporter import render, render_json

    _configure_logging(verbose)

    try:
        settings = Settings.from_env()
    except IndexCheckError as e:
        _fail(e, to_stderr=output_format == "json")

    indexes_path = indexes_path or settings.indexes_path
    snapshot = snapshot or settings.snapshot_path
    fetcher = SnapshotStateFetcher(snapshot) if snapshot else UnconfiguredStateFetcher()
    verifier = IndexVerifier(
        fetcher,
        firebaserc_path=firebaserc or settings.firebaserc_path,
        fetch_timeout=timeout if timeout is not None else settings.fetch_timeout,
    )

    if output_format == "text":
        console.print(
            f"\n[bold blue]indexcheck[/] — Verifying indexes: {escape(environment)}\n"
        )

    try:
        outcome = asyncio.run(verifier.verify(environment, indexes_path))
    except IndexCheckError as e:
        _fail(e, to_stderr=output_format == "json")

    if output_format == "json":
        body, code = render_json(outcome.result)
        click.echo(body)
        sys.exit(code)

    console.print(f"Project: [cyan]{escape(outcome.project_id)}[/]\n")
    summary, code = render(outcome.result)
    style = "green" if code == 0 else "red"
    console.print(summary, style=style, markup=False, highlight=False, soft_wrap=True)
    sys.exit(code)


# ── Definitions ──────────────────────────────────────────────────────


@main.command()
@click.argument("indexes_path", default="firestore.indexes.json")
def definitions(indexes_path: str):
    """List the expected index definitions, with field overrides expanded."""
    from indexcheck.spec.loader import load_specification

    try:
        expected = load_specification(indexes_path)
    except IndexCheckError as e:
        _fail(e)

    if not expected:
        console.print("[yellow]No index definitions found.[/]")
        return

    table = Table(title=f"Expected Indexes ({len(expected)} defined)")
    table.add_column("#", style="dim", width=4)
    table.add_column("Collection", style="cyan")
    table.add_column("Scope")
    table.add_column("Fields")

    for i, definition in enumerate(expected):
        table.add_row(
            str(i + 1),
            escape(definition.collection_group),
            definition.query_scope.value,
            escape(definition.describe()),
        )

    console.print(table)


# ── Schema ───────────────────────────────────────────────────────────


@main.command(name="schema")
def dump_schema():
    """Print the JSON Schema for the index specification file."""
    import json

    from indexcheck.spec.schema import get_schema

    click.echo(json.dumps(get_schema(), indent=2))


if __name__ == "__main__":
    main()
