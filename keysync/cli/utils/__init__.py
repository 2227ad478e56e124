"""CLI utilities."""

from .config import load_cli_config

__all__ = ["load_cli_config"]
