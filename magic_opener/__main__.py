"""Module entrypoint for `python -m magic_opener`."""

from __future__ import annotations

from .cli import run


if __name__ == "__main__":
    run()
