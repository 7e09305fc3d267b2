"""
File operation CLI commands
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.progress import Progress, BarColumn, DownloadColumn, TextColumn, TransferSpeedColumn
from rich.markup import escape
from rich.table import Table

from ...core.exceptions import ConfigError, ConnectError, RemoteFSError
from ...core.interfaces import ConnectionFactory
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.files.service import RemoteFileSession
from ...domain.files.walkthrough import run_walkthrough
from .prompts import ConsoleReporter, RichPromptProvider

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()


@contextmanager
def open_session(ctx: typer.Context) -> Iterator[RemoteFileSession]:
    """
    Connect with the options collected by the app callback and translate
    failures into exit code 1.
    """
    factory: ConnectionFactory = ctx.obj["factory"]
    try:
        session = factory.create(ctx.obj["params"])
    except ConfigError as e:
        stderr_console.print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)
    except ConnectError as e:
        stderr_console.print(f"[red]Connection error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)

    try:
        with session:
            yield session
    except RemoteFSError as e:
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)


def _transfer_progress() -> Progress:
    show = stdout_console.is_terminal
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=stdout_console,
        disable=not show,
        transient=True,
    )


def _read_text_argument(text: str) -> bytes:
    """``-`` reads the content from stdin"""
    if text == "-":
        return typer.get_binary_stream("stdin").read()
    return text.encode("utf-8")


def register_file_commands(app: typer.Typer) -> None:
    """Register file commands on the main app"""
    app.command(name="put")(put)
    app.command(name="get")(get)
    app.command(name="cat")(cat)
    app.command(name="write")(write)
    app.command(name="append")(append)
    app.command(name="mkdir")(mkdir)
    app.command(name="touch")(touch)
    app.command(name="ls")(ls)
    app.command(name="stat")(stat_)
    app.command(name="exists")(exists)
    app.command(name="mv")(mv)
    app.command(name="rm")(rm)
    app.command(name="rmdir")(rmdir)
    app.command(name="walkthrough")(walkthrough)


# ============================================================
# Content
# ============================================================

def put(
    ctx: typer.Context,
    local: Path = typer.Argument(..., help="Local source file"),
    remote: str = typer.Argument(..., help="Remote destination path"),
):
    """Upload a local file, creating remote parent directories."""
    with open_session(ctx) as session:
        with _transfer_progress() as progress:
            task = progress.add_task(f"Uploading {local.name}", total=None)
            copied = session.upload_file(
                local,
                remote,
                progress=lambda done, total: progress.update(task, completed=done, total=total),
            )
    stdout_console.print(f"[green]✓[/green] Uploaded {escape(str(local))} → {escape(remote)} ({copied} bytes)", highlight=False)


def get(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote source path"),
    local: Path = typer.Argument(..., help="Local destination file"),
):
    """Download a remote file, creating local parent directories."""
    with open_session(ctx) as session:
        with _transfer_progress() as progress:
            task = progress.add_task("Downloading", total=None)
            copied = session.download_file(
                remote,
                local,
                progress=lambda done, total: progress.update(task, completed=done, total=total),
            )
    stdout_console.print(f"[green]✓[/green] Downloaded {escape(remote)} → {escape(str(local))} ({copied} bytes)", highlight=False)


def cat(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote file"),
):
    """Print the contents of a remote file."""
    with open_session(ctx) as session:
        content = session.read_file_content(remote)
    out = typer.get_binary_stream("stdout")
    out.write(content)
    out.flush()


def write(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote file"),
    text: str = typer.Argument(..., help="New content, or - for stdin"),
):
    """Overwrite a remote file with TEXT."""
    data = _read_text_argument(text)
    with open_session(ctx) as session:
        session.update_file(remote, data)
    stdout_console.print(f"[green]✓[/green] Wrote {len(data)} bytes to {escape(remote)}", highlight=False)


def append(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Existing remote file"),
    text: str = typer.Argument(..., help="Content to append, or - for stdin"),
):
    """Append TEXT to an existing remote file."""
    data = _read_text_argument(text)
    with open_session(ctx) as session:
        session.append_to_file(remote, data)
    stdout_console.print(f"[green]✓[/green] Appended {len(data)} bytes to {escape(remote)}", highlight=False)


# ============================================================
# Metadata and directories
# ============================================================

def mkdir(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote directory"),
):
    """Create a remote directory and its parents."""
    with open_session(ctx) as session:
        session.create_directory(remote)
    stdout_console.print(f"[green]✓[/green] Directory {escape(remote)} ready", highlight=False)


def touch(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote file"),
):
    """Create an empty remote file (truncates an existing one)."""
    with open_session(ctx) as session:
        session.create_file(remote)
    stdout_console.print(f"[green]✓[/green] Created {escape(remote)}", highlight=False)


def ls(
    ctx: typer.Context,
    remote: str = typer.Argument(".", help="Remote directory"),
):
    """List a remote directory."""
    with open_session(ctx) as session:
        entries = session.list_directory(remote)

    table = Table(title=escape(remote), show_edge=False)
    table.add_column("Mode")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Name")
    for entry in entries:
        name = f"[bold blue]{escape(entry.name)}/[/bold blue]" if entry.is_dir else escape(entry.name)
        table.add_row(
            entry.permissions,
            str(entry.size),
            entry.mtime.strftime("%Y-%m-%d %H:%M"),
            name,
        )
    stdout_console.print(table)


def stat_(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote path"),
):
    """Show metadata for a remote path."""
    with open_session(ctx) as session:
        info = session.get_file_info(remote)

    stdout_console.print(f"[cyan]Name:[/cyan]     {escape(info.name)}", highlight=False)
    stdout_console.print(f"[cyan]Type:[/cyan]     {'directory' if info.is_dir else 'file'}", highlight=False)
    stdout_console.print(f"[cyan]Size:[/cyan]     {info.size}", highlight=False)
    stdout_console.print(f"[cyan]Mode:[/cyan]     {info.permissions} ({oct(info.mode & 0o7777)})", highlight=False)
    stdout_console.print(f"[cyan]Modified:[/cyan] {info.mtime.isoformat()}", highlight=False)


def exists(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote path"),
):
    """Exit 0 if the remote path exists, 1 if it does not."""
    with open_session(ctx) as session:
        found = session.file_exists(remote)
    stdout_console.print("yes" if found else "no")
    if not found:
        raise typer.Exit(1)


def mv(
    ctx: typer.Context,
    old: str = typer.Argument(..., help="Current remote path"),
    new: str = typer.Argument(..., help="New remote path"),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Replace an existing target (posix-rename extension)"
    ),
):
    """Rename a remote path."""
    with open_session(ctx) as session:
        session.rename_file(old, new, overwrite=overwrite)
    stdout_console.print(f"[green]✓[/green] Renamed {escape(old)} → {escape(new)}", highlight=False)


# ============================================================
# Deletion
# ============================================================

def rm(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote file"),
):
    """Delete a remote file."""
    with open_session(ctx) as session:
        session.delete_file(remote)
    stdout_console.print(f"[green]✓[/green] Deleted {escape(remote)}", highlight=False)


def rmdir(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote directory"),
    recursive: bool = typer.Option(False, "-r", "--recursive", help="Delete contents too"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Do not ask for confirmation"),
):
    """Delete a remote directory (must be empty unless -r)."""
    if recursive and not yes:
        prompts = ctx.obj.get("prompts") or RichPromptProvider()
        if not prompts.confirm(f"Delete {remote} and everything in it?"):
            stderr_console.print("Aborted")
            raise typer.Exit(1)

    with open_session(ctx) as session:
        if recursive:
            session.delete_directory_recursive(remote)
        else:
            session.delete_directory(remote)
    stdout_console.print(f"[green]✓[/green] Deleted {escape(remote)}", highlight=False)


def walkthrough(
    ctx: typer.Context,
    base_dir: str = typer.Option("/test", "--base-dir", help="Scratch directory, removed at the end"),
    local_file: Optional[Path] = typer.Option(None, "--local-file", help="Local file to upload during the run"),
):
    """Exercise every operation against a scratch directory."""
    with open_session(ctx) as session:
        result = run_walkthrough(
            session,
            base_dir=base_dir,
            local_file=local_file,
            reporter=ConsoleReporter(),
            echo=lambda line: stdout_console.print(line, highlight=False, markup=False),
        )

    if not result.ok:
        stderr_console.print(f"[red]{len(result.failed)} step(s) failed:[/red] {', '.join(result.failed)}")
        raise typer.Exit(1)
