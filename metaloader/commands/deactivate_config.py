import click

from metaloader.console import success, warning
from metaloader.objects.config_store import ConfigStore


@click.command(name="deactivate-config")
@click.argument("config_name", type=str, required=True)
@click.pass_context
def deactivate_config(ctx: click.Context, config_name: str) -> bool:
    """Mark a load configuration inactive."""

    config_store: ConfigStore = ctx.obj["CONFIG_STORE"]

    if config_store.deactivate_config(config_name):
        success(f"Deactivated configuration: {config_name}")
        return True

    warning(f"No active configuration named {config_name}")
    return False
