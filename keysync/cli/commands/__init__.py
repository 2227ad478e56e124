"""CLI commands."""

from . import (
    diff,
    keys,
    run,
    serve,
    sync,
)

__all__ = [
    "diff",
    "keys",
    "run",
    "serve",
    "sync",
]
