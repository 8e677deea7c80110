"""Configuration for SQL AI Tool.

Settings come from six layers, each overriding the one before it:

1. built-in defaults
2. the TOML config file (``[execution]`` table, global keys)
3. the named profile (--profile, SQLAI_PROFILE, or default_profile)
4. environment variables (PG*, SQLAI_*)
5. the --dsn flag
6. individual CLI flags

resolve_config() records which layer set every field. The resulting
ExecutionPolicy is built once per process and passed to the validator
and executor constructors.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from sqlai.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "sqlai-tool" / "config.toml"
DEFAULT_HISTORY_PATH = Path.home() / ".local" / "state" / "sqlai-tool" / "history.jsonl"

_READ_ONLY_OPERATIONS = frozenset({"SELECT"})
_DSN_SCHEMES = ("postgresql", "postgres")
_DSN_QUERY_PARAMS: dict[str, type] = {
    "sslmode": str,
    "connect_timeout": int,
    "application_name": str,
}
_SSL_MODES = ("disable", "allow", "prefer", "require", "verify-ca", "verify-full")
_OUTPUT_FORMATS = ("table", "json", "csv")

_ENV_VARS: dict[str, str] = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "dbname",
    "PGUSER": "user",
    "PGPASSWORD": "password",  # pragma: allowlist secret
    "SQLAI_MAX_EXECUTION_TIME_MS": "max_execution_time_ms",
    "SQLAI_MAX_ROW_LIMIT": "max_row_limit",
    "SQLAI_QUERY_TIMEOUT_SECONDS": "query_timeout_seconds",
}
_INT_FIELDS = frozenset(
    {"port", "max_execution_time_ms", "max_row_limit", "query_timeout_seconds"}
)

_CLI_FLAGS: dict[str, str] = {
    "host": "host",
    "port": "port",
    "database": "dbname",
    "user": "user",
    "password": "password",  # pragma: allowlist secret
    "schema": "default_schema",
    "history_file": "history_file",
    "max_rows": "max_row_limit",
    "timeout": "query_timeout_seconds",
}


def parse_dsn(dsn: str) -> dict[str, Any]:
    """Split a postgresql:// URL into connection fields.

    Only the parts present in the URL are returned.
    """
    url = urlparse(dsn)
    if url.scheme not in _DSN_SCHEMES:
        msg = f"Invalid DSN scheme: '{url.scheme}'. Use postgresql:// or postgres://"
        raise ConfigError(msg)

    parts = {
        "host": url.hostname,
        "port": url.port,
        "dbname": url.path.strip("/"),
        "user": url.username,
        "password": url.password,
    }
    fields = {key: value for key, value in parts.items() if value}
    for name, values in parse_qs(url.query).items():
        if name in _DSN_QUERY_PARAMS:
            fields[name] = _DSN_QUERY_PARAMS[name](values[0])
    return fields


class ExecutionPolicy(BaseModel):
    """Bounds applied to every statement execution."""

    model_config = ConfigDict(frozen=True)

    max_execution_time_ms: int = 30000
    max_row_limit: int = 1000
    allowed_operations: tuple[str, ...] = ("SELECT",)
    query_timeout_seconds: int = 30

    @field_validator("max_execution_time_ms", "max_row_limit", "query_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            msg = f"Invalid value: {v}. Must be a positive integer"
            raise ValueError(msg)
        return v

    @field_validator("allowed_operations")
    @classmethod
    def validate_operations(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        ops = tuple(op.strip().upper() for op in v)
        if not ops:
            raise ValueError("allowed_operations must not be empty")
        unsupported = sorted(set(ops) - _READ_ONLY_OPERATIONS)
        if unsupported:
            msg = (
                f"Unsupported operations: {', '.join(unsupported)}. "
                f"Only {', '.join(sorted(_READ_ONLY_OPERATIONS))} is allowed"
            )
            raise ValueError(msg)
        return ops


class ConnectionSettings(BaseModel):
    """Where and how to connect, plus the schema described in prompts."""

    host: str = "localhost"
    port: int = 5432
    dbname: str = "postgres"
    user: str | None = None
    password: str | None = None
    sslmode: str = "prefer"
    connect_timeout: int = 10
    application_name: str = "sqlai-tool"
    default_schema: str = "public"

    @field_validator("sslmode")
    @classmethod
    def check_sslmode(cls, v: str) -> str:
        if v not in _SSL_MODES:
            msg = f"Invalid sslmode: '{v}'. Expected one of: {', '.join(_SSL_MODES)}"
            raise ValueError(msg)
        return v

    @field_validator("port")
    @classmethod
    def check_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            msg = f"Invalid port: {v}. Allowed range is 1-65535"
            raise ValueError(msg)
        return v


class PgProfile(ConnectionSettings):
    """A named connection; ``dsn`` fills any field not given explicitly."""

    dsn: str | None = None

    @model_validator(mode="before")
    @classmethod
    def expand_dsn(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("dsn"):
            return {**parse_dsn(data["dsn"]), **data}
        return data

    @property
    def connection_url(self) -> str:
        """Connection URL with the password masked, safe for display."""
        auth = ""
        if self.user:
            auth = f"{self.user}:***@" if self.password else f"{self.user}@"
        return (
            f"postgresql://{auth}{self.host}:{self.port}/{self.dbname}"
            f"?sslmode={self.sslmode}"
        )


class AppConfig(BaseModel):
    default_format: str = "table"
    default_profile: str | None = None
    history_file: Path | None = None
    execution: ExecutionPolicy = ExecutionPolicy()
    profiles: dict[str, PgProfile] = {}

    @field_validator("default_format")
    @classmethod
    def check_default_format(cls, v: str) -> str:
        if v not in _OUTPUT_FORMATS:
            allowed = ", ".join(_OUTPUT_FORMATS)
            msg = f"Invalid default_format: '{v}'. Expected one of: {allowed}"
            raise ValueError(msg)
        return v


class ResolvedConfig(ConnectionSettings):
    default_format: str = "table"
    history_file: Path = DEFAULT_HISTORY_PATH
    policy: ExecutionPolicy = ExecutionPolicy()
    active_profile: str | None = None
    sources: dict[str, str] = {}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Read the TOML config file.

    A missing file yields the built-in defaults. Malformed TOML and
    values that fail validation raise ConfigError.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return AppConfig()
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(raw)
    except (ValidationError, ConfigError) as e:
        msg = f"Invalid configuration in {path}: {e}"
        raise ConfigError(msg) from e


class _Layers:
    """Field values together with the layer that last set each one."""

    def __init__(self, defaults: dict[str, Any]) -> None:
        self.values = dict(defaults)
        self.sources = dict.fromkeys(defaults, "default")

    def set(self, key: str, value: Any, source: str) -> None:
        self.values[key] = value
        self.sources[key] = source


def _env_int(env_var: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        msg = f"Invalid {env_var} value: '{value}'. Must be an integer"
        raise ConfigError(msg) from None


def _pick_profile(config: AppConfig, profile_name: str | None) -> str | None:
    name = profile_name or os.environ.get("SQLAI_PROFILE") or config.default_profile
    if name and name not in config.profiles:
        available = ", ".join(sorted(config.profiles)) or "none"
        msg = f"Unknown profile: '{name}'. Available profiles: {available}"
        raise ConfigError(msg)
    return name


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    dsn: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Merge all configuration layers into one ResolvedConfig."""
    layers = _Layers(
        {
            **ConnectionSettings().model_dump(),
            "default_format": "table",
            "history_file": DEFAULT_HISTORY_PATH,
            **ExecutionPolicy().model_dump(),
        }
    )

    if config.default_format != "table":
        layers.set("default_format", config.default_format, "config")
    if config.history_file is not None:
        layers.set("history_file", config.history_file.expanduser(), "config")
    for key in config.execution.model_fields_set:
        layers.set(key, getattr(config.execution, key), "config")

    active_profile = _pick_profile(config, profile_name)
    if active_profile:
        profile = config.profiles[active_profile]
        for key in profile.model_fields_set - {"dsn"}:
            layers.set(key, getattr(profile, key), f"profile: {active_profile}")

    for env_var, key in _ENV_VARS.items():
        raw = os.environ.get(env_var)
        if raw is not None:
            value = _env_int(env_var, raw) if key in _INT_FIELDS else raw
            layers.set(key, value, f"env: {env_var}")

    if dsn:
        for key, value in parse_dsn(dsn).items():
            layers.set(key, value, "dsn")

    for flag, key in _CLI_FLAGS.items():
        value = cli_overrides.get(flag)
        if value is not None:
            layers.set(key, value, f"cli: --{flag.replace('_', '-')}")
    timeout = cli_overrides.get("timeout")
    if timeout is not None:
        # Keep the reported limit in step with the enforced one.
        layers.set("max_execution_time_ms", timeout * 1000, "cli: --timeout")

    values = layers.values
    policy_values = {key: values.pop(key) for key in ExecutionPolicy.model_fields}
    try:
        policy = ExecutionPolicy(**policy_values)
    except ValidationError as e:
        msg = f"Invalid execution policy: {e}"
        raise ConfigError(msg) from e

    try:
        return ResolvedConfig(
            **values,
            policy=policy,
            active_profile=active_profile,
            sources=layers.sources,
        )
    except ValidationError as e:
        msg = f"Invalid connection settings: {e}"
        raise ConfigError(msg) from e
