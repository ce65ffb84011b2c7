"""metaloader CLI application entry point.

This module provides the main Click CLI interface for metaloader, which loads
delimited text files into database tables as described by named load
configurations. It handles configuration loading, logging setup, database
connection setup, and command registration.

Example:
    $ metaloader run employees
    $ metaloader list-configs
"""
import importlib.metadata
from pathlib import Path
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv

from metaloader.analytics.table_profiler import DEFAULT_OUTPUT_ROOT
from metaloader.commands.check_db_connection import check_db_connection
from metaloader.commands.deactivate_config import deactivate_config
from metaloader.commands.list_configs import list_configs
from metaloader.commands.run_load import run_load
from metaloader.commands.show_config import show_config
from metaloader.console import info
from metaloader.database.database_manager import DatabaseManager
from metaloader.logging_config import setup_logging
from metaloader.objects.app_config import AppConfig
from metaloader.objects.config_store import ConfigStore


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging (DEBUG level)",
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Write logs to file",
)
@click.option(
    "--config-store",
    type=click.Path(file_okay=True, dir_okay=False),
    help="Location of the TOML load configuration store",
    envvar="ML_CONFIG_STORE",
)
@click.option(
    "--database-url",
    type=str,
    help="SQLAlchemy URL of the destination database",
    envvar="ML_DATABASE_URL",
)
@click.option(
    "--db-schema",
    type=str,
    default=None,
    help="Database schema for destination tables",
    envvar="ML_DB_SCHEMA",
)
@click.option(
    "--analytics-dir",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Post-load analytics output root (default: output/analytics)",
    envvar="ML_ANALYTICS_DIR",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_file: Optional[str],
    config_store: Optional[str],
    database_url: Optional[str],
    db_schema: Optional[str],
    analytics_dir: Optional[str],
) -> None:
    """Load delimited files into database tables from named configurations.

    Args:
        ctx: Click context object for passing data between commands
        verbose: Enable DEBUG level logging if True
        log_file: Optional path to write log output
        config_store: Path to the TOML configuration store
        database_url: SQLAlchemy URL of the destination database
        db_schema: Optional schema for destination tables
        analytics_dir: Optional root directory for post-load analytics

    Raises:
        click.UsageError: If required parameters are missing
    """
    logger = setup_logging(verbose=verbose, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["logger"] = logger

    if not config_store:
        raise click.UsageError("ML_CONFIG_STORE must be set")
    if not database_url:
        raise click.UsageError("ML_DATABASE_URL must be set")

    app_config = AppConfig(
        config_store=Path(config_store),
        database_url=database_url,
        db_schema=db_schema,
        analytics_dir=Path(analytics_dir) if analytics_dir else DEFAULT_OUTPUT_ROOT,
    )

    logger.info(f"config_store: {app_config.config_store}")

    ctx.obj["CONFIG"] = app_config
    ctx.obj["CONFIG_STORE"] = ConfigStore(app_config.config_store)

    db_manager = DatabaseManager(app_config.database_url, schema=app_config.db_schema)
    ctx.obj["DB_CONNECTION"] = db_manager
    ctx.call_on_close(db_manager.close)


cli.add_command(run_load)
cli.add_command(list_configs)
cli.add_command(show_config)
cli.add_command(deactivate_config)
cli.add_command(check_db_connection)


def start_cli() -> None:
    """Initialize and start the metaloader CLI application.

    Loads environment variables from a .env file when one is found, displays
    the version, and hands over to the Click CLI group.
    """
    env_file = find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file)

    info("metaloader", bold=True)
    info(f"Version: {importlib.metadata.version('metaloader')}")
    if env_file:
        info(f"Configuration loaded from: {env_file}")

    cli(obj={})


if __name__ == "__main__":
    start_cli()
