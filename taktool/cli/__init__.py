"""taktool CLI — Typer-based command-line interface.

Provides the ``taktool`` command with subcommands for building plugin
packages and data packages.

All output uses Rich for formatted terminal display.
"""
