from typing import List

import click

from metaloader.console import info, table, warning
from metaloader.objects.config_store import ConfigStore
from metaloader.objects.file_config import FileConfig


@click.command(name="list-configs")
@click.pass_context
def list_configs(ctx: click.Context) -> List[FileConfig]:
    """Display active load configurations."""

    config_store: ConfigStore = ctx.obj["CONFIG_STORE"]
    configs = config_store.list_active_configs()

    if not configs:
        warning(f"No active configurations in {config_store.store_path}")
        return configs

    table(
        data=[
            [
                config.config_name,
                config.source_file_path,
                config.target_table_name,
                len(config.column_configs),
                config.chunk_size,
            ]
            for config in configs
        ],
        headers=["Config", "Source File", "Target Table", "Column Count", "Chunk Size"],
        title="Active Configurations",
    )
    info(f"{len(configs)} active configurations")

    return configs
