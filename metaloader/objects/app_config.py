"""Application configuration model.

This module defines the runtime configuration for metaloader: where the
configuration store lives, which database receives the loads, and where
post-load analytics are written.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from metaloader.analytics.table_profiler import DEFAULT_OUTPUT_ROOT


class AppConfig(BaseModel):
    """Application runtime configuration.

    Attributes:
        config_store: Path to the TOML configuration store
        database_url: SQLAlchemy URL of the destination database
        db_schema: Optional database schema for destination tables
        analytics_dir: Root directory for post-load analytics output

    Example:
        >>> config = AppConfig(
        ...     config_store=Path("config/load_configs.toml"),
        ...     database_url="postgresql://loader@localhost/warehouse",
        ...     analytics_dir=Path("output/analytics"),
        ... )
    """

    config_store: Path
    database_url: str
    db_schema: Optional[str] = None
    analytics_dir: Path = DEFAULT_OUTPUT_ROOT
