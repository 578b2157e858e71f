"""CLI application for sqlarvault using Rich and Typer."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from sqlarvault.core.config import (
    DATABASE_PATH,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    setup_logging,
)
from sqlarvault.core.errors import SqlarVaultError
from sqlarvault.core.paths import split_key
from sqlarvault.core.types import (
    FileListResult,
    OperationResult,
    SortDirection,
    SortField,
)
from sqlarvault.core.vault import Vault
from sqlarvault.storage.db import database_exists

app = typer.Typer(
    name="sqlar-vault",
    help="sqlarvault CLI - files in a single SQLite archive",
    no_args_is_help=True,
)

console = Console()


def _segments(path: str | None) -> list[str]:
    """Split a slash-separated directory argument into segments."""
    if not path:
        return []
    return [part for part in path.split("/") if part]


def _open_vault(ctx: typer.Context, must_exist: bool = False) -> Vault:
    """Open the archive selected by --db."""
    db_path: Path = ctx.obj["db"]
    if must_exist and not database_exists(db_path):
        console.print(f"[red]Archive not found: {db_path}[/red]")
        raise typer.Exit(1)
    return Vault(db_path)


def _check(result: OperationResult) -> None:
    """Print a named failure and exit non-zero."""
    if not result.success:
        detail = f": {result.message}" if result.message else ""
        console.print(f"[red]{result.error}{detail}[/red]")
        raise typer.Exit(1)


def _run(coro) -> None:
    """Run a command coroutine, reporting vault errors instead of a traceback."""
    try:
        asyncio.run(coro)
    except SqlarVaultError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)


def _print_page(title: str, result: FileListResult, page_size: int) -> None:
    if not result.files:
        console.print("[dim]No files.[/dim]")
    else:
        table = Table(title=title, show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Modified")

        for entry in result.files:
            table.add_row(
                entry.key,
                str(entry.sz),
                entry.modified_at.strftime("%Y-%m-%d %H:%M:%S"),
            )

        console.print(table)

    pages = max((result.total_files + page_size - 1) // page_size, 1)
    console.print(
        f"[dim]{result.total_files} files, page {result.current_page} of {pages}[/dim]"
    )


@app.callback()
def main(
    ctx: typer.Context,
    db: Path = typer.Option(
        DATABASE_PATH,
        "--db",
        "-d",
        help="Path to the archive file (default: $SQLARVAULT_DB)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
):
    """sqlarvault CLI - files in a single SQLite archive."""
    if debug:
        setup_logging("DEBUG")
        console.print("[dim]Debug logging enabled[/dim]")
    ctx.obj = {"db": db}


@app.command()
def put(
    ctx: typer.Context,
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    directory: str = typer.Option(
        "", "--dir", help="Target directory, e.g. root/images"
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Stored file name"),
    mtime: Optional[int] = typer.Option(
        None, "--mtime", help="Unix modification time"
    ),
):
    """Store a local file in the archive."""

    async def _put():
        with _open_vault(ctx) as vault:
            with open(source, "rb") as f:
                result = await vault.store_file(
                    _segments(directory), name or source.name, f, mtime
                )
        _check(result)
        console.print(f"[green]Stored {result.file_name_with_path}[/green]")

    _run(_put())


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Path of the file, e.g. root/images/a.png"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to file"
    ),
):
    """Retrieve a file's content."""

    async def _get():
        segments, file_name = split_key(key)
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.retrieve_file(segments, file_name)
        _check(result)
        data = result.file.data or b""
        if output is None:
            typer.echo(data, nl=False)
        else:
            output.write_bytes(data)
            console.print(f"[green]Wrote {len(data)} bytes to {output}[/green]")

    _run(_get())


@app.command()
def update(
    ctx: typer.Context,
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    key: str = typer.Argument(..., help="Path of the stored file"),
    mtime: Optional[int] = typer.Option(
        None, "--mtime", help="Unix modification time"
    ),
):
    """Replace the content of a stored file."""

    async def _update():
        segments, file_name = split_key(key)
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.update_file(
                segments, file_name, source.read_bytes(), mtime
            )
        _check(result)
        console.print(f"[green]Updated {result.file_name_with_path}[/green]")

    _run(_update())


@app.command()
def mv(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Path of the stored file"),
    new_name: str = typer.Argument(..., help="New file name"),
    to: Optional[str] = typer.Option(None, "--to", help="Destination directory"),
):
    """Rename a file, optionally moving it to another directory."""

    async def _mv():
        segments, file_name = split_key(key)
        new_directory = None if to is None else _segments(to)
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.rename_file(
                segments, file_name, new_name, new_directory
            )
        _check(result)
        console.print(
            f"[green]{result.old_file_name_with_path} -> "
            f"{result.new_file_name_with_path}[/green]"
        )

    _run(_mv())


@app.command()
def rm(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Path of the stored file"),
):
    """Delete a single file."""

    async def _rm():
        segments, file_name = split_key(key)
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.delete_file(segments, file_name)
        _check(result)
        console.print(f"[green]Deleted {key}[/green]")

    _run(_rm())


@app.command()
def rmdir(
    ctx: typer.Context,
    directory: str = typer.Argument(..., help="Directory to clear, e.g. root/tmp"),
):
    """Delete every file below a directory."""

    async def _rmdir():
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.delete_directory(_segments(directory))
        _check(result)
        console.print(f"[green]Deleted {result.deleted} files[/green]")

    _run(_rmdir())


@app.command()
def wipe(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm deletion"),
):
    """Delete every file in the archive."""
    if not yes:
        console.print("[yellow]Refusing to wipe without --yes[/yellow]")
        raise typer.Exit(1)

    async def _wipe():
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.delete_all_files()
        console.print(f"[green]Deleted {result.deleted} files[/green]")

    _run(_wipe())


@app.command()
def ls(
    ctx: typer.Context,
    directory: str = typer.Argument("", help="Directory to list (default: all)"),
    page_size: int = typer.Option(
        DEFAULT_PAGE_SIZE, "--page-size", "-n", min=1, max=MAX_PAGE_SIZE
    ),
    page: int = typer.Option(1, "--page", "-p"),
    sort: SortField = typer.Option(SortField.NAME, "--sort", "-s"),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
):
    """List files in a directory."""

    async def _ls():
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.list_files(
                _segments(directory),
                page_size,
                page,
                sort,
                SortDirection.DESC if desc else SortDirection.ASC,
            )
        _print_page(f"/{directory.strip('/')}", result, page_size)

    _run(_ls())


@app.command()
def find(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Substring to look for in file paths"),
    directory: str = typer.Argument("", help="Directory to search (default: all)"),
    page_size: int = typer.Option(
        DEFAULT_PAGE_SIZE, "--page-size", "-n", min=1, max=MAX_PAGE_SIZE
    ),
    page: int = typer.Option(1, "--page", "-p"),
    sort: SortField = typer.Option(SortField.NAME, "--sort", "-s"),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
):
    """Search files whose path contains a substring."""

    async def _find():
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.search_files(
                query,
                _segments(directory),
                page_size,
                page,
                sort,
                SortDirection.DESC if desc else SortDirection.ASC,
            )
        _print_page(f"Search: {query}", result, page_size)

    _run(_find())


@app.command()
def count(ctx: typer.Context):
    """Count files in the archive."""

    async def _count():
        with _open_vault(ctx, must_exist=True) as vault:
            result = await vault.count_files()
        console.print(str(result.total_files))

    _run(_count())


def run_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run_cli()
