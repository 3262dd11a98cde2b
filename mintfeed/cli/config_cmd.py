"""Config commands."""

import json

import rich_click as click
from rich.markup import escape
from rich.syntax import Syntax

from ..config import (
    deep_merge,
    get_config_path,
    get_key,
    load_config,
    load_user_config,
    save_config,
    set_key,
    unset_key,
    validate_config,
)
from ..errors import ConfigError
from ._console import console


@click.group()
def config():
    """Manage configuration."""
    pass


@config.command("show")
@click.argument("key", required=False)
def config_show(key: str | None):
    """Show the effective configuration, or a single dotted KEY."""
    try:
        cfg = load_config()
        value = get_key(cfg, key) if key else cfg
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    except KeyError:
        raise click.ClickException(f"Unknown config key: {key}") from None

    if isinstance(value, (dict, list)):
        console.print(Syntax(json.dumps(value, indent=2), "json", theme="monokai"))
    else:
        console.print(json.dumps(value))


@config.command("path")
def config_path():
    """Show configuration file path."""
    console.print(str(get_config_path()))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value (e.g., llm.model gpt-4.1-mini).

    Only overrides are written to config.json; the merged result must validate.
    """
    # JSON first so numbers, booleans and lists keep their type
    try:
        parsed_value = json.loads(value)
    except json.JSONDecodeError:
        parsed_value = value

    try:
        overrides = load_user_config()
        set_key(overrides, key, parsed_value)
        validate_config(deep_merge(load_config(), overrides))
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    save_config(overrides)
    console.print(f"Set {key} = {escape(json.dumps(parsed_value))}")


@config.command("unset")
@click.argument("key")
def config_unset(key: str):
    """Remove an override so KEY falls back to its default."""
    try:
        overrides = load_user_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if not unset_key(overrides, key):
        console.print(f"{key} is not set in {get_config_path()}")
        return
    save_config(overrides)
    console.print(f"Unset {key}")
