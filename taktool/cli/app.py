"""Main Typer application — registers all CLI commands.

Entry point: ``taktool`` (configured via pyproject.toml project.scripts).

Commands: plugins-package (pp), data-package (dp).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from taktool import __description__, __version__
from taktool.cli.commands.data_package import data_package_cmd
from taktool.cli.commands.plugins_package import plugins_package_cmd
from taktool.config import settings

app = typer.Typer(
    name="taktool",
    help=f"taktool {__version__}: {__description__}.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="plugins-package", help="Create plugins package.")(plugins_package_cmd)
app.command(name="pp", help="Alias for plugins-package.", hidden=True)(plugins_package_cmd)
app.command(name="data-package", help="Create data package.")(data_package_cmd)
app.command(name="dp", help="Alias for data-package.", hidden=True)(data_package_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
