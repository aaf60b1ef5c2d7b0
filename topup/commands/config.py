"""Config commands: inspect and edit ~/.topup/config.ini."""

import click

from ..config import ConfigManager
from ..themed_console import console
from ..utils import handle_errors


@click.group("config")
def config_command():
    """Read and change configuration values (keys look like section.key)."""


@config_command.command("path")
@click.pass_context
@handle_errors
def config_path_command(click_ctx: click.Context):
    """Print the configuration file location."""
    config = ConfigManager(click_ctx.obj.get("config_path"))
    console.print(str(config.get_config_path()), markup=False, highlight=False)


@config_command.command("show")
@click.pass_context
@handle_errors
def config_show_command(click_ctx: click.Context):
    """Show every configured value."""
    config = ConfigManager(click_ctx.obj.get("config_path"))
    items = config.items()
    if not items:
        console.dim(f"No settings in {config.get_config_path()}")
        return
    for key, value in items:
        console.print(f"{key} = {value}", markup=False, highlight=False)


@config_command.command("get")
@click.argument("key")
@click.pass_context
@handle_errors
def config_get_command(click_ctx: click.Context, key: str):
    """Print the value of KEY."""
    config = ConfigManager(click_ctx.obj.get("config_path"))
    value = config.get(key)
    if value is None:
        console.warning(f"{key} is not set")
        click_ctx.exit(1)
    console.print(value, markup=False, highlight=False)


@config_command.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
@handle_errors
def config_set_command(click_ctx: click.Context, key: str, value: str):
    """Set KEY to VALUE."""
    config = ConfigManager(click_ctx.obj.get("config_path"))
    config.set(key, value)
    console.success(f"{key} = {value}")


@config_command.command("unset")
@click.argument("key")
@click.pass_context
@handle_errors
def config_unset_command(click_ctx: click.Context, key: str):
    """Remove KEY."""
    config = ConfigManager(click_ctx.obj.get("config_path"))
    if config.unset(key):
        console.success(f"Removed {key}")
    else:
        console.warning(f"{key} is not set")
