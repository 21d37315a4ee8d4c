"""Config command for copypick CLI."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from copypick.core.config import CONFIG_FILENAMES, export_template, load_config, user_config_path
from copypick.core.errors import ConfigError

app = typer.Typer()
console = Console()


def _print_settings(cfg) -> None:
    exts = ", ".join(cfg.allowed_extensions) if cfg.allowed_extensions else "any"
    console.print(f"  Show hidden: [cyan]{'Enabled' if cfg.show_hidden else 'Disabled'}[/]")
    console.print(f"  Allowed extensions: [cyan]{exts}[/]")
    console.print(f"  Pick files: [cyan]{'Enabled' if cfg.allow_files else 'Disabled'}[/]")
    console.print(f"  Pick directories: [cyan]{'Enabled' if cfg.allow_directories else 'Disabled'}[/]")
    console.print(f"  Height: [cyan]{cfg.height if cfg.height else 'terminal'}[/]")
    console.print(f"  Cursor: [cyan]{cfg.cursor}[/]")
    console.print(f"  Default path: [cyan]{cfg.default_path or 'current directory'}[/]")


@app.command("show")
def show(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file (YAML)"),
):
    """Show current configuration."""
    try:
        cfg = load_config(config_file)
    except ConfigError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)

    console.print("\n[bold]Current Configuration:[/]")
    source = str(cfg.source) if cfg.source else "built-in defaults"
    console.print(f"  Source: [underline]{source}[/]")
    _print_settings(cfg)
    console.print(f"\n[dim]Search order: {', '.join(CONFIG_FILENAMES)}, then {user_config_path()}[/]")
    console.print()


@app.command("export")
def export(
    output: Path = typer.Option(Path(CONFIG_FILENAMES[0]), "--output", "-o", help="Where to write the template"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Export configuration template."""
    if output.exists() and not force:
        console.print(f"[bold red]❌ Error:[/] {output} already exists (use --force to overwrite)")
        raise typer.Exit(1)
    export_template(output)
    console.print(f"[bold green]✔[/] Configuration template exported to [underline]{output}[/]")
    console.print("[dim]Edit this file to change browser defaults[/]")


@app.command("validate")
def validate(config_file: Path = typer.Argument(..., help="Config file to validate")):
    """Validate a configuration file."""
    try:
        cfg = load_config(config_file)
    except ConfigError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)
    console.print(f"[bold green]✔[/] Configuration file is valid: [underline]{config_file}[/]")
    _print_settings(cfg)
