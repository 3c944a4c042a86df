"""``taktool data-package`` — zip a directory into a data package."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from taktool.config import settings
from taktool.core.data_package import DataPackager
from taktool.core.errors import TaktoolError
from taktool.core.workspace import Workspace

console = Console()


def data_package_cmd(
    directory: Path = typer.Option(
        Path("."),
        "--directory",
        "-C",
        help="Directory to package.",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    name: str = typer.Option(
        "", "--name", help="Data package name (default is the directory name)."
    ),
    uid: str = typer.Option(
        "", "--uid", help="Data package UID (default is randomly generated)."
    ),
    ext: str = typer.Option(
        settings.data_package_extension, "--ext", help="Data package file extension."
    ),
    delete_on_receive: bool = typer.Option(
        False,
        "--delete-on-receive",
        help='Set "onReceiveDelete" to delete the package after receive.',
    ),
    import_on_receive: bool = typer.Option(
        False,
        "--import-on-receive",
        help='Set "onReceiveImport" to import the package after receive.',
    ),
) -> None:
    """Create a data package from every file in a directory."""
    try:
        packager = DataPackager(
            Workspace(directory),
            name=name or None,
            uid=uid or None,
            extension=ext,
            on_receive_delete=delete_on_receive,
            on_receive_import=import_on_receive,
        )
        result = packager.build()
    except TaktoolError as exc:
        console.print(f"[bold red]Error creating data package:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    manifest = result.manifest
    console.print(
        Panel(
            "\n".join([
                f"[bold]Name:[/bold]  {manifest.name}",
                f"[bold]UID:[/bold]   {manifest.uid}",
                f"[bold]Files:[/bold] {len(manifest.contents)}",
            ]),
            title="[bold]Data Package[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print(f"[bold green]Data package created:[/bold green] {result.package_path}")
