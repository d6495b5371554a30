"""Environment-driven application configuration."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    port: int
    dbname: str
    user: str
    password: str
    connect_timeout: int

    def connect_kwargs(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.dbname,
            "user": self.user,
            "password": self.password,
            "connect_timeout": self.connect_timeout,
        }


@dataclass(frozen=True)
class AppConfig:
    """Configuration for the plan and onboarding API."""

    database: DatabaseConfig
    jwt_secret_key: str
    jwt_algorithm: str
    session_cookie_name: str
    plan_cache_max_age: int
    plan_cache_stale_while_revalidate: int
    cors_origins: Tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"

    @property
    def plan_cache_control(self) -> str:
        return (
            f"private, max-age={self.plan_cache_max_age}, "
            f"stale-while-revalidate={self.plan_cache_stale_while_revalidate}"
        )


def _to_int(name: str, value: Optional[str], *, default: int, minimum: int = 0) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return parsed


def _parse_connect_timeout(raw_value: Optional[str]) -> int:
    if raw_value is None or raw_value.strip() == "":
        return 5
    try:
        timeout = float(raw_value)
    except ValueError as exc:
        raise ValueError("DB_CONNECT_TIMEOUT must be a number") from exc
    if timeout < 0:
        raise ValueError("DB_CONNECT_TIMEOUT must be non-negative")
    return int(math.ceil(timeout))


def _split_origins(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(origin.strip().rstrip("/") for origin in value.split(",") if origin.strip())


def load_app_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load :class:`AppConfig` from environment variables.

    When ``env`` is omitted the process environment is used, after merging any
    ``.env`` file found by :func:`dotenv.load_dotenv`.
    """

    if env is None:
        load_dotenv()
        env_mapping: Mapping[str, str] = os.environ
    else:
        env_mapping = env

    database = DatabaseConfig(
        host=env_mapping.get("DB_HOST", "127.0.0.1"),
        port=_to_int("DB_PORT", env_mapping.get("DB_PORT"), default=5432, minimum=1),
        dbname=env_mapping.get("DB_NAME", "kitasuro"),
        user=env_mapping.get("DB_USER", "kitasuro"),
        password=env_mapping.get("DB_PASSWORD", "kitasuro"),
        connect_timeout=_parse_connect_timeout(env_mapping.get("DB_CONNECT_TIMEOUT")),
    )

    return AppConfig(
        database=database,
        jwt_secret_key=env_mapping.get("JWT_SECRET_KEY", "dev-secret-change-me"),
        jwt_algorithm=env_mapping.get("JWT_ALGORITHM", "HS256"),
        session_cookie_name=env_mapping.get("SESSION_COOKIE_NAME", "session"),
        plan_cache_max_age=_to_int(
            "PLAN_CACHE_MAX_AGE", env_mapping.get("PLAN_CACHE_MAX_AGE"), default=60
        ),
        plan_cache_stale_while_revalidate=_to_int(
            "PLAN_CACHE_STALE_WHILE_REVALIDATE",
            env_mapping.get("PLAN_CACHE_STALE_WHILE_REVALIDATE"),
            default=30,
        ),
        cors_origins=_split_origins(env_mapping.get("CORS_ORIGINS")),
        log_level=(env_mapping.get("LOG_LEVEL") or "INFO").strip().upper(),
    )
