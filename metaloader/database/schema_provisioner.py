"""Destination table provisioning.

The target table is created from the column configuration before any row is
written. Semantic type tags map to storage types through a fixed table; a tag
with no mapping fails the run here, never at insert time.
"""

from typing import Callable, Dict, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.types import TypeEngine

from metaloader.exceptions import UnknownDataType
from metaloader.logging_config import get_logger
from metaloader.objects.data_types import TypeFamily, type_family
from metaloader.objects.file_config import ColumnConfig, FileConfig

logger = get_logger(__name__)


def _string_type(max_length: Optional[int]) -> TypeEngine:
    return String(max_length) if max_length else Text()


STORAGE_TYPES: Dict[TypeFamily, Callable[[Optional[int]], TypeEngine]] = {
    TypeFamily.STRING: _string_type,
    TypeFamily.NUMBER: lambda _: Numeric(),
    TypeFamily.INTEGER: lambda _: BigInteger(),
    TypeFamily.DATE: lambda _: Date(),
    TypeFamily.TIMESTAMP: lambda _: DateTime(),
    TypeFamily.BOOLEAN: lambda _: Boolean(),
}


class SchemaProvisioner:
    """Ensures the destination table of a FileConfig exists.

    Attributes:
        file_config: Configuration describing the table
        schema: Optional database schema for the table
    """

    def __init__(self, file_config: FileConfig, schema: Optional[str] = None) -> None:
        self.file_config = file_config
        self.schema = schema

    def storage_type(self, column: ColumnConfig) -> TypeEngine:
        """Storage type of a column.

        Raises:
            UnknownDataType: If the column's tag has no mapping
        """
        family = type_family(column.data_type)
        if family is None:
            raise UnknownDataType(column.data_type, column.source_column_name)
        return STORAGE_TYPES[family](column.max_length)

    def build_table(self, metadata: Optional[MetaData] = None) -> Table:
        """Build the Table definition without touching the database."""
        metadata = metadata if metadata is not None else MetaData()
        columns = [
            Column(
                column.target_column_name,
                self.storage_type(column),
                nullable=column.is_nullable and not column.is_primary_key,
                primary_key=column.is_primary_key,
                autoincrement=False,
            )
            for column in self.file_config.ordered_columns()
        ]
        return Table(
            self.file_config.target_table_name, metadata, *columns, schema=self.schema
        )

    def provision(self, engine: Engine) -> Table:
        """Create the table if it does not exist.

        An existing table is left untouched.

        Returns:
            Table definition used for inserts

        Raises:
            UnknownDataType: Before any DDL, if a tag has no mapping
        """
        metadata = MetaData()
        table = self.build_table(metadata)
        table_name = self.file_config.target_table_name

        if inspect(engine).has_table(table_name, schema=self.schema):
            logger.info(f"Table {table_name} already exists, no structural change")
            return table

        metadata.create_all(engine, tables=[table], checkfirst=True)
        logger.info(
            f"Created table {table_name} with {len(table.columns)} columns"
        )
        return table
