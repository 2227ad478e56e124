"""Configuration resolution for CLI commands."""

from pathlib import Path
from typing import Optional

from keysync.config import ConfigError, SyncConfig, load_config


def load_cli_config(config_path: Optional[str]) -> SyncConfig:
    """Load config from the environment, on top of ``--config`` when given.

    Raises ConfigError if required settings are missing or invalid.
    """
    path = Path(config_path).expanduser() if config_path else None
    if path is not None and path.is_dir():
        raise ConfigError(f"Config path is a directory: {path}")
    return load_config(path)
