"""``taktool plugins-package`` — build product.infz from a directory of APKs.

Extracts metadata from every APK, optionally removes older revisions and
renames the rest, and writes icons plus the product.inf inventory into
product.infz.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from taktool.core.errors import TaktoolError
from taktool.core.packager import PluginsPackager
from taktool.core.workspace import Workspace

console = Console()


def plugins_package_cmd(
    directory: Path = typer.Option(
        Path("."),
        "--directory",
        "-C",
        help="Directory containing the APK files.",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    rename: bool = typer.Option(
        True,
        "--rename/--no-rename",
        help="Rename plugins to preferred names. Renaming removes older plugins with the same name.",
    ),
) -> None:
    """Create a plugins package (product.infz) from the APKs in a directory."""
    packager = PluginsPackager(Workspace(directory))
    try:
        result = packager.build(rename=rename)
    except TaktoolError as exc:
        console.print(f"[bold red]Error creating plugins package:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if result.records:
        table = Table(title="Packaged Artifacts")
        table.add_column("Type", style="cyan")
        table.add_column("Package")
        table.add_column("Name", style="green")
        table.add_column("Version")
        table.add_column("Revision", justify="right")
        table.add_column("File")
        for record in result.records:
            table.add_row(
                record.kind.value,
                record.identity_name,
                record.display_name,
                record.version_string,
                record.revision,
                record.artifact_path,
            )
        console.print(table)
    else:
        console.print("[dim]No APK files found.[/dim]")

    console.print(f"[bold green]Package created:[/bold green] {result.package_path}")
