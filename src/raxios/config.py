"""Client-wide defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping

from .content_type import ContentType
from .exceptions import ConfigurationError

__version__ = "0.1.0"

DEFAULT_USER_AGENT = f"raxios/{__version__}"
DEFAULT_TIMEOUT = 30.0

ENV_VAR_MAPPING = {
    "content_type": "RAXIOS_CONTENT_TYPE",
    "accept": "RAXIOS_ACCEPT",
    "timeout": "RAXIOS_TIMEOUT",
    "strict_status": "RAXIOS_STRICT_STATUS",
    "strict_fields": "RAXIOS_STRICT_FIELDS",
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_timeout(name: str, raw: str) -> float | None:
    value = raw.strip().lower()
    if value in {"none", "off"}:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"{name} must be greater than 0")
    return timeout


@dataclass(frozen=True)
class ClientConfig:
    """Defaults applied to every request a client sends.

    ``content_type`` left as ``None`` resolves to JSON at call time.
    """

    headers: Mapping[str, str] | None = None
    content_type: ContentType | str | None = None
    accept: ContentType | str | None = ContentType.JSON
    timeout: float | None = DEFAULT_TIMEOUT
    strict_status: bool = False
    strict_fields: bool = False
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    def with_headers(self, headers: Mapping[str, str] | None) -> "ClientConfig":
        return replace(self, headers=dict(headers) if headers else None)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> "ClientConfig":
        """Build a config from ``RAXIOS_*`` environment variables.

        Keyword overrides take precedence over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        raw = env.get(ENV_VAR_MAPPING["content_type"])
        if raw:
            values["content_type"] = ContentType.coerce(raw)
        raw = env.get(ENV_VAR_MAPPING["accept"])
        if raw:
            values["accept"] = ContentType.coerce(raw)
        raw = env.get(ENV_VAR_MAPPING["timeout"])
        if raw is not None:
            values["timeout"] = _parse_timeout(ENV_VAR_MAPPING["timeout"], raw)
        for field_name in ("strict_status", "strict_fields"):
            raw = env.get(ENV_VAR_MAPPING[field_name])
            if raw is not None:
                values[field_name] = _parse_bool(ENV_VAR_MAPPING[field_name], raw)

        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
