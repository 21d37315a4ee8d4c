"""Browse commands: pick a file in the TUI, then copy it or print its path."""

from __future__ import annotations

import shutil
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from copypick.core.config import BrowserConfig, load_config
from copypick.core.errors import ConfigError
from copypick.tui.models import BrowseResult
from copypick.utils.utils import resolve_start_path


console = Console()


def run_browser(start_dir: Path, config: BrowserConfig) -> BrowseResult:
    """Run the full-screen browser and return what the user chose."""
    try:
        from copypick.tui.app import CopyPickApp
    except Exception as e:  # pragma: no cover
        raise typer.Exit(f"Failed to import TUI dependencies: {e}")

    result = CopyPickApp(start_dir, config=config).run()
    if result is None:
        return BrowseResult(path=None, cancelled=True)
    return result


def apply_overrides(
    cfg: BrowserConfig,
    *,
    hidden: Optional[bool] = None,
    ext: Optional[List[str]] = None,
    dirs: Optional[bool] = None,
    files: Optional[bool] = None,
    height: Optional[int] = None,
) -> BrowserConfig:
    """Command-line options win over config values; None means "not given"."""
    changes = {}
    if hidden is not None:
        changes["show_hidden"] = hidden
    if ext:
        changes["allowed_extensions"] = [e.strip() for e in ext if e.strip()]
    if dirs is not None:
        changes["allow_directories"] = dirs
    if files is not None:
        changes["allow_files"] = files
    if height is not None:
        changes["height"] = height
    return replace(cfg, **changes)


def _browse(
    path: Optional[str],
    *,
    hidden: Optional[bool],
    ext: Optional[List[str]],
    dirs: Optional[bool],
    files: Optional[bool],
    height: Optional[int],
    config_file: Optional[Path],
) -> BrowseResult:
    try:
        cfg = load_config(config_file)
    except ConfigError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)

    cfg = apply_overrides(cfg, hidden=hidden, ext=ext, dirs=dirs, files=files, height=height)
    if not cfg.allow_files and not cfg.allow_directories:
        raise typer.BadParameter("Nothing can be picked with both --no-files and --no-dirs")

    start = resolve_start_path(path or cfg.default_path)
    if not start.is_dir():
        raise typer.BadParameter(f"Not a directory: {start}", param_hint="PATH")

    return run_browser(start, cfg)


def copy_selection(source: Path, dest_dir: Path) -> Path:
    """
    Copy a picked file (or directory tree) into `dest_dir`.

    Args:
        source: Path the user confirmed
        dest_dir: Existing directory to copy into

    Returns:
        Path of the new copy

    Raises:
        OSError: Destination missing, same file as the source, or the copy failed
    """
    if not dest_dir.is_dir():
        raise NotADirectoryError(f"Destination is not a directory: {dest_dir}")
    target = dest_dir / source.name
    if source.is_dir():
        shutil.copytree(source, target)
    else:
        shutil.copy2(source, target)
    return target


# -----------------------
# Shared options
# -----------------------
_PATH_ARG = typer.Argument(None, help="Directory to start in (default: current directory)")
_HIDDEN_OPT = typer.Option(None, "--hidden/--no-hidden", help="Show hidden files")
_EXT_OPT = typer.Option(None, "--ext", "-e", help="Allowed file suffix (repeatable), e.g. -e .md")
_DIRS_OPT = typer.Option(None, "--dirs/--no-dirs", help="Allow choosing directories with Enter")
_FILES_OPT = typer.Option(None, "--files/--no-files", help="Allow choosing files")
_HEIGHT_OPT = typer.Option(None, "--height", min=1, help="List rows (default: follow terminal height)")
_CONFIG_OPT = typer.Option(None, "--config", "-c", help="Config file (YAML)")


def copy(
    path: Optional[str] = _PATH_ARG,
    dest: Path = typer.Option(Path("."), "--dest", "-d", help="Directory to copy into"),
    hidden: Optional[bool] = _HIDDEN_OPT,
    ext: Optional[List[str]] = _EXT_OPT,
    dirs: Optional[bool] = _DIRS_OPT,
    files: Optional[bool] = _FILES_OPT,
    height: Optional[int] = _HEIGHT_OPT,
    config_file: Optional[Path] = _CONFIG_OPT,
) -> None:
    """Pick a file and copy it into the current directory (or --dest)."""
    result = _browse(
        path, hidden=hidden, ext=ext, dirs=dirs, files=files, height=height, config_file=config_file
    )
    if result.cancelled or not result.path:
        return

    try:
        target = copy_selection(Path(result.path), dest)
    except OSError as e:
        console.print(f"[bold red]❌ Error:[/] Could not copy {result.path}: {e}")
        raise typer.Exit(1)

    console.print(f"[bold green]✔[/] Copied: [underline]{result.path}[/] → {target}")


def pick(
    path: Optional[str] = _PATH_ARG,
    hidden: Optional[bool] = _HIDDEN_OPT,
    ext: Optional[List[str]] = _EXT_OPT,
    dirs: Optional[bool] = _DIRS_OPT,
    files: Optional[bool] = _FILES_OPT,
    height: Optional[int] = _HEIGHT_OPT,
    config_file: Optional[Path] = _CONFIG_OPT,
) -> None:
    """Pick a file and print its absolute path (exit 1 when cancelled)."""
    result = _browse(
        path, hidden=hidden, ext=ext, dirs=dirs, files=files, height=height, config_file=config_file
    )
    if result.cancelled or not result.path:
        raise typer.Exit(1)
    typer.echo(result.path)


__all__ = ["copy", "pick", "copy_selection", "apply_overrides", "run_browser"]
