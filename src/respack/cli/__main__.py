"""Module entrypoint for the respack CLI."""

from __future__ import annotations

from respack.cli.app import main

if __name__ == "__main__":
    main()
