from typing import Optional

import click

from metaloader.console import error, info, newline, table
from metaloader.objects.config_store import ConfigStore
from metaloader.objects.file_config import FileConfig


@click.command(name="show-config")
@click.argument("config_name", type=str, required=True)
@click.pass_context
def show_config(ctx: click.Context, config_name: str) -> Optional[FileConfig]:
    """Display one active load configuration and its columns."""

    config_store: ConfigStore = ctx.obj["CONFIG_STORE"]
    file_config = config_store.get_file_config(config_name)

    if file_config is None:
        error(f"Configuration not found: {config_name}")
        ctx.exit(1)

    info(f"Configuration: {file_config.config_name}", bold=True)
    info(f"Source file: {file_config.source_file_path}")
    info(f"Target table: {file_config.target_table_name}")
    info(
        f"Delimiter: {file_config.delimiter!r}  Header: {file_config.has_header}  "
        f"Chunk size: {file_config.chunk_size}"
    )
    newline()

    table(
        data=[
            [
                column.column_order,
                column.source_column_name,
                column.target_column_name,
                column.data_type,
                column.max_length,
                "yes" if column.is_nullable else "no",
                column.validation_rule,
                column.transformation_rule,
                column.default_value,
            ]
            for column in file_config.column_configs
        ],
        headers=[
            "Order",
            "Source",
            "Target",
            "Type",
            "Max Length",
            "Nullable",
            "Validation",
            "Transformation",
            "Default",
        ],
        title="Columns",
    )

    return file_config
