import click

from metaloader.console import error, success
from metaloader.database.database_manager import DatabaseManager


@click.command(name="check-db-connection")
@click.pass_context
def check_db_connection(ctx: click.Context) -> bool:
    """Test the connection to the destination database."""

    db_manager: DatabaseManager = ctx.obj["DB_CONNECTION"]

    if db_manager.test_connection():
        success("Successfully connected to the database.")
        return True

    error(f"Failed to connect to the database. {db_manager.connection_error}")
    ctx.exit(1)
