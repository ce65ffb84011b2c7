"""Pytest fixtures and configuration."""

import logging
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from metaloader.logging_config import ROOT_LOGGER_NAME
from metaloader.objects.file_config import ColumnConfig, FileConfig

SAMPLE_CSV_CONTENT = (
    "id,name,email\n"
    "1,alice,alice@x.com\n"
    "2,,bad-email\n"
    "3,bob,bob@y.com\n"
)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests without a database")
    config.addinivalue_line("markers", "integration: tests against a SQLite database")
    config.addinivalue_line("markers", "security: security validation tests")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_columns() -> List[ColumnConfig]:
    """id / name / email columns as used by the end-to-end scenario."""
    return [
        ColumnConfig(
            source_column_name="id",
            target_column_name="ID",
            data_type="NUMBER",
            column_order=1,
            validation_rule="NUMERIC",
            is_nullable=False,
        ),
        ColumnConfig(
            source_column_name="name",
            target_column_name="NAME",
            data_type="VARCHAR2",
            max_length=100,
            column_order=2,
            validation_rule="NOT_NULL",
            transformation_rule="UPPER",
        ),
        ColumnConfig(
            source_column_name="email",
            target_column_name="EMAIL",
            data_type="VARCHAR2",
            max_length=255,
            column_order=3,
            validation_rule="EMAIL",
        ),
    ]


@pytest.fixture
def sample_csv_file(temp_dir: Path) -> Path:
    """Create the end-to-end sample CSV file."""
    csv_file = temp_dir / "people.csv"
    csv_file.write_text(SAMPLE_CSV_CONTENT)
    return csv_file


@pytest.fixture
def make_file_config(
    temp_dir: Path, sample_columns: List[ColumnConfig]
) -> Callable[..., FileConfig]:
    """Factory for FileConfig objects pointing into the temp directory."""

    def _make(**overrides: Any) -> FileConfig:
        values: dict = {
            "config_name": "people",
            "source_file_path": str(temp_dir / "people.csv"),
            "target_table_name": "PEOPLE",
            "delimiter": ",",
            "has_header": True,
            "chunk_size": 100,
            "column_configs": sample_columns,
        }
        values.update(overrides)
        return FileConfig(**values)

    return _make


@pytest.fixture
def sqlite_engine(temp_dir: Path) -> Generator[Engine, None, None]:
    """File-backed SQLite engine so every connection sees committed data."""
    engine = create_engine(f"sqlite:///{temp_dir / 'load.db'}")
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def restore_metaloader_logger() -> Generator[None, None, None]:
    """Undo setup_logging() so every test starts from the default logger state."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in logger.handlers:
        if handler not in saved[0]:
            handler.close()
    logger.handlers, logger.level, logger.propagate = saved
