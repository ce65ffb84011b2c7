import click

from metaloader.console import error, info, newline, success, table, warning
from metaloader.database.database_manager import DatabaseManager
from metaloader.exceptions import ConfigurationError
from metaloader.objects.app_config import AppConfig
from metaloader.objects.config_store import ConfigStore
from metaloader.objects.run_result import RunResult
from metaloader.services.job_launcher import JobLauncher


@click.command(name="run")
@click.argument("config_name", type=str, required=True)
@click.option(
    "--parallel",
    is_flag=True,
    default=False,
    help="Commit chunks concurrently (source row order is not preserved)",
)
@click.option(
    "--no-analytics",
    is_flag=True,
    default=False,
    help="Skip table profiling after the load completes",
)
@click.pass_context
def run_load(
    ctx: click.Context, config_name: str, parallel: bool, no_analytics: bool
) -> RunResult:
    """Load the source file of CONFIG_NAME into its target table."""

    app_config: AppConfig = ctx.obj["CONFIG"]
    config_store: ConfigStore = ctx.obj["CONFIG_STORE"]
    db_manager: DatabaseManager = ctx.obj["DB_CONNECTION"]

    if not db_manager.is_valid_connection:
        error(f"Failed to connect to the database. {db_manager.connection_error}")
        ctx.exit(1)

    launcher = JobLauncher(
        config_store,
        db_manager,
        analytics_dir=None if no_analytics else app_config.analytics_dir,
        parallel_chunks=parallel,
    )

    try:
        result = launcher.run_sync(config_name)
    except ConfigurationError as e:
        error(str(e))
        ctx.exit(1)
    finally:
        launcher.shutdown()

    newline()
    table(
        data=[
            ["Lines read", result.lines_read],
            ["Records accepted", result.records_accepted],
            ["Records skipped", result.records_skipped],
            ["Chunks committed", result.chunks_committed],
            ["Rows committed", result.rows_committed],
        ],
        headers=["Metric", "Count"],
        title=f"Load {result.config_name} -> {result.target_table_name}",
    )

    if result.analytics_error:
        warning(f"Analytics failed: {result.analytics_error}")

    if not result.succeeded:
        error(f"Load {result.state.value}: {result.error_type}: {result.error}")
        info(f"Source lines committed before failure: {result.committed_lines}")
        ctx.exit(1)

    success(f"Load {result.state.value}: {result.rows_committed:,} rows committed")
    return result
