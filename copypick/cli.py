#!/usr/bin/env python3
"""
copypick - terminal file picker
Main CLI entry point
"""

from __future__ import annotations

import typer

from copypick.commands import browse_cmd, config_cmd

app = typer.Typer(
    name="copypick",
    help="Browse a directory tree in the terminal and pick a file",
    no_args_is_help=True,
    add_completion=True,
)

app.command(name="copy", help="Pick a file and copy it into a directory")(browse_cmd.copy)
app.command(name="pick", help="Pick a file and print its path")(browse_cmd.pick)

app.add_typer(config_cmd.app, name="config", help="Manage configuration settings")


@app.callback()
def callback() -> None:
    """
    copypick - terminal file picker

    Commands:
      copy    - Browse, pick a file, copy it into the current directory (or --dest)
      pick    - Browse, pick a file, print its absolute path

    Utilities:
      config  - Manage configuration settings
    """
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
