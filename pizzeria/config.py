"""
Runtime configuration.

Responsibilities:
- Decide which services (catalog, copy, recommendations) this process hosts.
- Locate peer services when a capability is hosted elsewhere.
- Expose retention, timeout and fault-simulation knobs read from the environment.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from .store.retention import RetentionPolicy

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

ENV_PREFIX = "PIZZERIA"
DEFAULT_LOCAL_ENDPOINT = "http://localhost:3333"

_TRUTHY = {"1", "t", "true"}
_FALSY = {"0", "f", "false"}


class Service(str, Enum):
    CATALOG = "catalog"
    COPY = "copy"
    RECOMMENDATIONS = "recommendations"

    @property
    def env_name(self) -> str:
        return f"{ENV_PREFIX}_{self.name}"


def _parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(env[name])
    except (KeyError, ValueError):
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float(env[name])
    except (KeyError, ValueError):
        return default


@dataclass(frozen=True)
class RuntimeConfig:
    serve_all: bool = True
    services: frozenset[Service] = frozenset()
    endpoints: Mapping[Service, str] = field(default_factory=dict)
    internal_token: str = "1"
    http_timeout: float = 10.0
    request_timeout: float = 30.0
    trust_client_traces: bool = False
    fixed_pizzas: int = 100
    max_pizzas: int = 500
    copy_delay_ms: int = 0
    recommendations_delay_ms: int = 0
    recommendations_fail_percentage: float = 0.0
    log_level: str = "INFO"
    log_format: str = "text"

    def serves(self, service: Service) -> bool:
        return self.serve_all or service in self.services

    def endpoint(self, service: Service) -> str:
        """Base URL of the peer hosting ``service``, without trailing slash."""
        return self.endpoints.get(service, DEFAULT_LOCAL_ENDPOINT).rstrip("/")

    @property
    def retention(self) -> RetentionPolicy:
        return RetentionPolicy(max_rows=self.max_pizzas, fixed_rows=self.fixed_pizzas)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RuntimeConfig:
        env = os.environ if environ is None else environ

        # Unset means "serve everything"; otherwise the flag must be truthy.
        all_raw = env.get(f"{ENV_PREFIX}_ALL_SERVICES")
        serve_all = True if all_raw is None else bool(_parse_bool(all_raw))

        services = frozenset(s for s in Service if _parse_bool(env.get(s.env_name)))
        endpoints = {
            s: env[f"{s.env_name}_ENDPOINT"]
            for s in Service
            if env.get(f"{s.env_name}_ENDPOINT")
        }

        defaults = cls()
        return cls(
            serve_all=serve_all,
            services=services,
            endpoints=endpoints,
            internal_token=env.get(f"{ENV_PREFIX}_INTERNAL_TOKEN") or defaults.internal_token,
            http_timeout=_env_float(env, f"{ENV_PREFIX}_HTTP_TIMEOUT", defaults.http_timeout),
            request_timeout=_env_float(env, f"{ENV_PREFIX}_REQUEST_TIMEOUT", defaults.request_timeout),
            trust_client_traces=bool(_parse_bool(env.get(f"{ENV_PREFIX}_TRUST_CLIENT_TRACES"))),
            fixed_pizzas=_env_int(env, f"{ENV_PREFIX}_DB_FIXED_PIZZAS", defaults.fixed_pizzas),
            max_pizzas=_env_int(env, f"{ENV_PREFIX}_DB_MAX_PIZZAS", defaults.max_pizzas),
            copy_delay_ms=_env_int(env, f"{ENV_PREFIX}_DELAY_COPY", 0),
            recommendations_delay_ms=_env_int(env, f"{ENV_PREFIX}_DELAY_RECOMMENDATIONS", 0),
            recommendations_fail_percentage=_env_float(
                env, f"{ENV_PREFIX}_FAIL_RATE_RECOMMENDATIONS", 0.0,
            ),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
            log_format=env.get("LOG_FORMAT", defaults.log_format).lower(),
        )
