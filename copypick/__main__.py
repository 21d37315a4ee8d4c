"""Allow `python -m copypick`."""

from copypick.cli import main

main()
