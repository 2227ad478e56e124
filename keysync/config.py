"""Process configuration, from environment variables and an optional YAML file."""
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

_RECOGNISED_BOOL_VALUES = frozenset(
    ("1", "true", "yes", "0", "false", "no")
)

ENVIRONMENTS = ("production", "development")

# YAML key -> environment variable
ENV_VARS = {
    "env": "KEYSYNC_ENV",
    "web3signer_api_url": "WEB3SIGNER_API_URL",
    "eth2_client_api_url": "ETH2_CLIENT_API_URL",
    "signer_url": "KEYSYNC_SIGNER_URL",
    "eth2_client_api_token": "ETH2_CLIENT_API_TOKEN",
    "interval_seconds": "KEYSYNC_INTERVAL_SECONDS",
    "http_timeout": "KEYSYNC_HTTP_TIMEOUT",
    "http_max_retries": "KEYSYNC_HTTP_MAX_RETRIES",
    "allow_full_wipe": "KEYSYNC_ALLOW_FULL_WIPE",
}


class ConfigError(Exception):
    """Configuration is missing or invalid."""

    pass


@dataclass(frozen=True)
class HttpConfig:
    timeout: float = 30.0
    max_retries: int = 3


@dataclass(frozen=True)
class SyncConfig:
    """Everything needed to wire and drive reconciliation cycles.

    ``env`` selects ``production`` (apply deltas) or ``development`` (dry run:
    fetch and reconcile, never mutate). ``signer_url`` is the signer address
    written into imported remote keys; it defaults to ``web3signer_api_url``.
    """

    env: str
    web3signer_api_url: str
    eth2_client_api_url: str
    signer_url: Optional[str] = None
    eth2_client_api_token: Optional[str] = field(default=None, repr=False)
    interval_seconds: float = 60.0
    http: HttpConfig = field(default_factory=HttpConfig)
    allow_full_wipe: bool = True

    @property
    def dry_run(self) -> bool:
        return self.env == "development"

    @property
    def effective_signer_url(self) -> str:
        return self.signer_url or self.web3signer_api_url


def _parse_bool(value: Any, default: bool) -> bool:
    """Parse a boolean setting with explicit default.

    Recognises ``true/1/yes`` and ``false/0/no`` (case-insensitive).
    Returns *default* when the value is empty or unset.
    Logs a warning and returns *default* for unrecognised values
    (e.g. typos like ``ture``).
    """
    if isinstance(value, bool):
        return value
    if value is None or value == "":
        return default
    normalised = str(value).lower()
    if normalised not in _RECOGNISED_BOOL_VALUES:
        logger.warning(
            "Unrecognised boolean value %r, using default %s. "
            "Expected one of: true/1/yes or false/0/no.",
            value,
            default,
        )
        return default
    return normalised in ("1", "true", "yes")


def _parse_url(name: str, value: str) -> str:
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ConfigError(f"{name} must start with http:// or https://, got {value!r}")
    return value.rstrip("/")


def _parse_positive(name: str, value: Any, default: float, cast: type = float) -> Any:
    if value is None or value == "":
        return cast(default)
    try:
        parsed = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if parsed <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return parsed


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """Load configuration from an optional YAML file, overridden by the environment."""
    raw: dict[str, Any] = _read_yaml(path) if path is not None else {}
    env = os.environ if environ is None else environ
    for key, var in ENV_VARS.items():
        if env.get(var):
            raw[key] = env[var]
    return _build(raw)


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    return load_config(None, environ)


def load_config_from_file(path: Path) -> SyncConfig:
    return _build(_read_yaml(path))


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    unknown = sorted(set(data) - set(ENV_VARS))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in ENV_VARS}


def _build(raw: Mapping[str, Any]) -> SyncConfig:
    missing = [ENV_VARS[k] for k in ("env", "web3signer_api_url", "eth2_client_api_url") if not raw.get(k)]
    if missing:
        raise ConfigError(f"Missing: {', '.join(missing)}")

    env_name = str(raw["env"]).strip().lower()
    if env_name not in ENVIRONMENTS:
        raise ConfigError(f"KEYSYNC_ENV must be either production or development, got {raw['env']!r}")

    signer_url = raw.get("signer_url")
    allow_full_wipe = _parse_bool(raw.get("allow_full_wipe"), default=True)
    if allow_full_wipe:
        logger.debug("Full wipe allowed: an empty custodian listing removes every client key")

    return SyncConfig(
        env=env_name,
        web3signer_api_url=_parse_url("WEB3SIGNER_API_URL", str(raw["web3signer_api_url"])),
        eth2_client_api_url=_parse_url("ETH2_CLIENT_API_URL", str(raw["eth2_client_api_url"])),
        signer_url=_parse_url("KEYSYNC_SIGNER_URL", str(signer_url)) if signer_url else None,
        eth2_client_api_token=str(raw["eth2_client_api_token"]).strip() if raw.get("eth2_client_api_token") else None,
        interval_seconds=_parse_positive("KEYSYNC_INTERVAL_SECONDS", raw.get("interval_seconds"), 60.0),
        http=HttpConfig(
            timeout=_parse_positive("KEYSYNC_HTTP_TIMEOUT", raw.get("http_timeout"), 30.0),
            max_retries=_parse_positive("KEYSYNC_HTTP_MAX_RETRIES", raw.get("http_max_retries"), 3, cast=int),
        ),
        allow_full_wipe=allow_full_wipe,
    )
