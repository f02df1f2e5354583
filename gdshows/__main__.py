"""Allow running as `python -m gdshows`."""

from gdshows.cli import main

main()
