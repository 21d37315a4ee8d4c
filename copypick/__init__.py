"""copypick - browse a directory tree in the terminal and pick a file."""

__version__ = "1.0.0"
__description__ = "Terminal directory browser and file picker"

from copypick.cli import app, main

__all__ = ["app", "main", "__version__"]
