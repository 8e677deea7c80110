"""The ``config`` command group: inspect resolved settings and profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from sqlai.cli.commands._shared import get_resolved_config
from sqlai.core import config as config_module

if TYPE_CHECKING:
    from pathlib import Path

    from sqlai.core.config import ResolvedConfig

config_app = typer.Typer(help="Configuration management commands")

_CONNECTION_FIELDS = (
    ("host", "host"),
    ("port", "port"),
    ("database", "dbname"),
    ("user", "user"),
    ("password", "password"),
    ("sslmode", "sslmode"),
    ("schema", "default_schema"),
)
_POLICY_FIELDS = (
    "max_row_limit",
    "query_timeout_seconds",
    "max_execution_time_ms",
    "allowed_operations",
)
_GENERAL_FIELDS = (("format", "default_format"), ("history", "history_file"))


def _config_path(ctx: typer.Context) -> Path:
    return ctx.obj.get("config_file") or config_module.DEFAULT_CONFIG_PATH


def _display(key: str, value: object) -> object:
    if key == "password":
        return "not set" if value is None else "***"
    if value is None:
        return "not set"
    if isinstance(value, tuple):
        return ", ".join(value)
    return value


def _section(title: str, resolved: ResolvedConfig, fields, owner: object) -> None:
    typer.echo(title)
    for label, key in fields:
        value = _display(key, getattr(owner, key))
        typer.echo(f"  {label}: {value} ({resolved.sources.get(key, 'default')})")
    typer.echo("")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Print every resolved setting and the layer it came from."""
    resolved = get_resolved_config(ctx)
    _section("Connection Settings (resolved):", resolved, _CONNECTION_FIELDS, resolved)
    _section(
        "Execution Policy:",
        resolved,
        [(name, name) for name in _POLICY_FIELDS],
        resolved.policy,
    )
    _section("General:", resolved, _GENERAL_FIELDS, resolved)
    typer.echo(f"Active Profile: {resolved.active_profile or 'none'}")
    typer.echo(f"Config File: {_config_path(ctx)}")


@config_app.command("profiles")
def config_profiles(ctx: typer.Context) -> None:
    """List the profiles defined in the config file."""
    app_config = config_module.load_config(ctx.obj.get("config_file"))
    if not app_config.profiles:
        typer.echo("No profiles configured.")
        typer.echo(f"Add profiles to: {_config_path(ctx)}")
        return

    active = ctx.obj.get("profile") or app_config.default_profile
    typer.echo("Available Profiles:")
    typer.echo("")
    for name in sorted(app_config.profiles):
        profile = app_config.profiles[name]
        typer.echo(f"* {name} (active)" if name == active else f"  {name}")
        typer.echo(f"      url: {profile.connection_url}")
        typer.echo(f"      schema: {profile.default_schema}")
        typer.echo("")
