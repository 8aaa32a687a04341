"""
Runtime settings.

Environment variables (all optional):
    VET_RESOURCES_DATA_FILE        JSON/YAML resource file (default: packaged seed)
    VET_RESOURCES_REMOTE_URL       Remote search service root (default: disabled)
    VET_RESOURCES_REMOTE_TIMEOUT   Seconds for the remote lookup (default: 5)
    VET_RESOURCES_REMOTE_RETRIES   Attempts for transient remote errors (default: 3)
    VET_RESOURCES_STATE_DIR        Directory for saved/history/location state
                                   (default: in-memory)
    VET_RESOURCES_API_HOST         HTTP API bind host (default: 127.0.0.1)
    VET_RESOURCES_API_PORT         HTTP API port (default: 8000)
    VET_RESOURCES_LOG_LEVEL        Logging level (default: INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from vet_resources.shared.exceptions import ConfigurationError, ErrorContext

ENV_PREFIX = "VET_RESOURCES_"


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(f"{ENV_PREFIX}{name}", "").strip()
    return value or None


N = TypeVar("N", int, float)


def _number(environ: Mapping[str, str], name: str, cast: type[N], default: N) -> N:
    raw = _env(environ, name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{ENV_PREFIX}{name} must be a {cast.__name__}, got {raw!r}",
            context=ErrorContext(operation="load_settings", input_value=raw),
        ) from e


@dataclass(frozen=True)
class Settings:
    data_file: str | None = None
    remote_base_url: str | None = None
    remote_timeout: float = 5.0
    remote_max_retries: int = 3
    state_dir: str | None = None
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        environ = os.environ if environ is None else environ
        return cls(
            data_file=_env(environ, "DATA_FILE"),
            remote_base_url=_env(environ, "REMOTE_URL"),
            remote_timeout=_number(environ, "REMOTE_TIMEOUT", float, 5.0),
            remote_max_retries=_number(environ, "REMOTE_RETRIES", int, 3),
            state_dir=_env(environ, "STATE_DIR"),
            api_host=_env(environ, "API_HOST") or "127.0.0.1",
            api_port=_number(environ, "API_PORT", int, 8000),
            log_level=(_env(environ, "LOG_LEVEL") or "INFO").upper(),
        )

    def to_container_config(self) -> dict[str, Any]:
        """Plain dict for ``ApplicationContainer.config.from_dict``."""
        return asdict(self)
