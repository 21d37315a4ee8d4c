"""
Configuration management for copypick.

Browser defaults (hidden files, extension filter, what may be chosen, viewport
height) live in a YAML file. Command-line options override whatever is loaded
here.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from copypick.core.errors import ConfigError


CONFIG_FILENAMES = ("copypick_config.yaml", "copypick_config.yml")
DEFAULT_CURSOR = ">>"


def _user_config_dir(app_name: str = "copypick") -> Path:
    """
    Return an OS-appropriate user configuration directory.

    - macOS: ~/Library/Application Support/<app_name>/
    - Linux/Unix: $XDG_CONFIG_HOME/<app_name>/ (default ~/.config/<app_name>/)
    - Windows: %APPDATA%\\<app_name>\\
    """
    home = Path.home()
    plat = sys.platform.lower()

    if plat == "darwin":
        return home / "Library" / "Application Support" / app_name

    if plat.startswith("win"):
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / app_name
        return home / app_name

    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else (home / ".config")
    return base / app_name


def user_config_path() -> Path:
    return _user_config_dir("copypick") / "config.yaml"


@dataclass
class BrowserConfig:
    """Browser defaults loaded from YAML.

    Attributes:
        show_hidden: List dot-files (and Windows hidden files)
        allowed_extensions: Suffixes a file must end with to be chosen; empty = any
        allow_files: Files may be chosen
        allow_directories: Directories may be chosen with Enter
        height: Viewport rows; None derives it from the terminal height
        cursor: Marker drawn in front of the highlighted entry
        default_path: Start directory when none is given on the command line
    """

    show_hidden: bool = False
    allowed_extensions: List[str] = field(default_factory=list)
    allow_files: bool = True
    allow_directories: bool = False
    height: Optional[int] = None
    cursor: str = DEFAULT_CURSOR
    default_path: Optional[str] = None

    # Where this config came from (None = built-in defaults).
    source: Optional[Path] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "show_hidden": self.show_hidden,
            "allowed_extensions": list(self.allowed_extensions),
            "allow_files": self.allow_files,
            "allow_directories": self.allow_directories,
            "height": self.height,
            "cursor": self.cursor,
            "default_path": self.default_path,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any], source: Optional[Path] = None) -> "BrowserConfig":
        """
        Build a config from parsed YAML, validating value types.

        Raises:
            ConfigError: Unknown keys or values of the wrong type
        """
        known = {f.name for f in fields(BrowserConfig) if f.name != "source"}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

        cfg = BrowserConfig(source=source)
        for key in ("show_hidden", "allow_files", "allow_directories"):
            if key in d:
                if not isinstance(d[key], bool):
                    raise ConfigError(f"'{key}' must be true or false, got {d[key]!r}")
                setattr(cfg, key, d[key])

        exts = d.get("allowed_extensions")
        if exts is not None:
            if isinstance(exts, str):
                exts = [exts]
            if not isinstance(exts, list) or not all(isinstance(e, str) for e in exts):
                raise ConfigError("'allowed_extensions' must be a list of strings")
            cfg.allowed_extensions = [e.strip() for e in exts if e.strip()]

        height = d.get("height")
        if height is not None:
            if isinstance(height, bool) or not isinstance(height, int) or height < 1:
                raise ConfigError(f"'height' must be a positive integer, got {height!r}")
            cfg.height = height

        cursor = d.get("cursor")
        if cursor is not None:
            if not isinstance(cursor, str) or not cursor:
                raise ConfigError("'cursor' must be a non-empty string")
            cfg.cursor = cursor

        default_path = d.get("default_path")
        if default_path is not None:
            if not isinstance(default_path, str):
                raise ConfigError("'default_path' must be a string")
            cfg.default_path = default_path or None

        return cfg


def read_config_file(config_file: Path) -> BrowserConfig:
    """
    Parse one YAML config file.

    Raises:
        ConfigError: If the file can't be read, isn't valid YAML, or holds bad values
    """
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not load config {config_file}: {e}") from e

    if data is None:
        return BrowserConfig(source=config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_file} must be a mapping at the top level")
    return BrowserConfig.from_dict(data, source=config_file)


def find_config_file() -> Optional[Path]:
    """First existing config: ./copypick_config.yaml|yml, then the user config dir."""
    for name in CONFIG_FILENAMES:
        candidate = Path(name)
        if candidate.exists():
            return candidate
    user_path = user_config_path()
    if user_path.exists():
        return user_path
    return None


def load_config(config_file: Optional[Path] = None) -> BrowserConfig:
    """
    Load browser configuration.

    Args:
        config_file: Optional path to a YAML config file. If None, looks for
                    'copypick_config.yaml' in the current directory and then in
                    the user config directory.

    Returns:
        BrowserConfig instance (defaults when no file is found)

    Raises:
        ConfigError: If an explicitly given file is missing, or any file found is invalid
    """
    if config_file is not None:
        if not Path(config_file).exists():
            raise ConfigError(f"Config file not found: {config_file}")
        return read_config_file(Path(config_file))

    found = find_config_file()
    if found is None:
        return BrowserConfig()
    return read_config_file(found)


_TEMPLATE = """# =============================================================================
# copypick configuration
# =============================================================================
# Command-line options override everything in this file.
# =============================================================================

# List dot-files (and hidden files on Windows)
show_hidden: false

# Only files whose names end with one of these suffixes can be chosen.
# Leave empty to allow any file.
allowed_extensions: []
#  - .md
#  - .txt

# What Enter may choose
allow_files: true
allow_directories: false

# Rows in the file list. null follows the terminal height.
height: null

# Marker in front of the highlighted entry
cursor: ">>"

# Start directory when none is given on the command line (null = cwd)
default_path: null
"""


def export_template(output_path: Path) -> None:
    """Write a commented configuration template."""
    Path(output_path).write_text(_TEMPLATE, encoding="utf-8")


__all__ = [
    "BrowserConfig",
    "CONFIG_FILENAMES",
    "DEFAULT_CURSOR",
    "user_config_path",
    "read_config_file",
    "find_config_file",
    "load_config",
    "export_template",
]
