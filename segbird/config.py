# segbird/config.py

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from segbird.errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_JWT_TTL = 10
DEFAULT_API_PREFIX = "/segbird"
# expiry must stay representable as a datetime
MAX_JWT_TTL = int(timedelta(days=3650).total_seconds())

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

ServiceRegistry = Mapping[str, str]


@dataclass(frozen=True)
class DispatcherConfig:
    signing_secret: str
    token_ttl_seconds: int = DEFAULT_JWT_TTL
    path_prefix: str = DEFAULT_API_PREFIX

    def __repr__(self) -> str:
        # never print the secret
        return (
            f"DispatcherConfig(signing_secret='***', "
            f"token_ttl_seconds={self.token_ttl_seconds}, "
            f"path_prefix={self.path_prefix!r})"
        )


def build_registry(services: Any) -> ServiceRegistry:
    """Validate the name → base URL mapping and freeze it."""
    if services is None:
        return MappingProxyType({})
    if not isinstance(services, Mapping):
        log.warning("Ignoring services setting of type %s", type(services).__name__)
        return MappingProxyType({})

    for name, host in services.items():
        if not isinstance(host, str):
            raise ConfigurationError(f"Invalid service {name}. Host must be a string.")
    return MappingProxyType(dict(services))


def _parse_ttl(jwt_ttl: Any) -> int:
    if isinstance(jwt_ttl, bool):
        raise ConfigurationError("settings.jwtTtl must be a number of seconds.")
    try:
        if isinstance(jwt_ttl, str):
            match = _LEADING_INT.match(jwt_ttl)
            if not match:
                log.warning("Could not parse jwtTtl %r, using the default", jwt_ttl)
            jwt_ttl = int(match.group(1)) if match else None
        elif jwt_ttl is not None:
            jwt_ttl = int(jwt_ttl)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ConfigurationError("settings.jwtTtl must be a number of seconds.") from exc

    if jwt_ttl is not None and jwt_ttl < 0:
        raise ConfigurationError("settings.jwtTtl must not be negative.")
    if jwt_ttl is not None and jwt_ttl > MAX_JWT_TTL:
        raise ConfigurationError(f"settings.jwtTtl must not exceed {MAX_JWT_TTL} seconds.")
    return jwt_ttl or DEFAULT_JWT_TTL


def build_config(
    jwt_secret: Any,
    jwt_ttl: Any = None,
    api_prefix: Any = None,
) -> DispatcherConfig:
    if not isinstance(jwt_secret, str) or not jwt_secret:
        raise ConfigurationError("settings.jwtSecret is empty. You must configure a secret.")
    if api_prefix and not isinstance(api_prefix, str):
        raise ConfigurationError("settings.apiPrefix must be a string.")

    return DispatcherConfig(
        signing_secret=jwt_secret,
        token_ttl_seconds=_parse_ttl(jwt_ttl),
        path_prefix=api_prefix or DEFAULT_API_PREFIX,
    )


# ────────────────────────────────────────────────────────────────────
#  Environment
# ────────────────────────────────────────────────────────────────────
def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Read the init() keyword arguments from SEGBIRD_* environment variables.

    SEGBIRD_SERVICES holds a JSON object, e.g. '{"orders": "http://orders:3000"}'.
    Validation of the values themselves is left to init().
    """
    env = os.environ if environ is None else environ

    services: Any = None
    raw_services = env.get("SEGBIRD_SERVICES")
    if raw_services:
        try:
            services = json.loads(raw_services)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"SEGBIRD_SERVICES is not valid JSON: {exc}") from exc
        if not isinstance(services, dict):
            raise ConfigurationError("SEGBIRD_SERVICES must be a JSON object.")

    return {
        "services": services,
        "jwt_secret": env.get("SEGBIRD_JWT_SECRET"),
        "jwt_ttl": env.get("SEGBIRD_JWT_TTL"),
        "api_prefix": env.get("SEGBIRD_API_PREFIX"),
    }
