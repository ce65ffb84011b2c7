"""Chunked, transactional inserts into the destination table."""

from typing import List, Sequence

from sqlalchemy import Table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from metaloader.exceptions import ChunkCommitFailure
from metaloader.logging_config import get_logger
from metaloader.objects.data_record import GenericDataRecord
from metaloader.objects.file_config import FileConfig

logger = get_logger(__name__)


class BatchWriter:
    """Writes one chunk of accepted records per transaction.

    All rows of a chunk are sent as one batched insert inside a transaction
    scoped to that chunk: they commit together or not at all. Chunks that
    committed earlier are never touched by a later failure.

    Attributes:
        engine: Destination database engine
        table: Provisioned destination table
        file_config: Configuration mapping record columns to table columns
    """

    def __init__(self, engine: Engine, table: Table, file_config: FileConfig) -> None:
        self.engine = engine
        self.table = table
        self.file_config = file_config
        self._source_columns: List[str] = file_config.source_column_names

    def write_chunk(
        self, records: Sequence[GenericDataRecord], chunk_number: int = 0
    ) -> int:
        """Insert ``records`` as one atomic batch.

        Returns:
            Number of rows written

        Raises:
            ChunkCommitFailure: If a record is incomplete or the insert fails;
                the chunk's transaction is rolled back
        """
        if not records:
            return 0

        for record in records:
            missing = record.missing_columns(self._source_columns)
            if missing:
                raise ChunkCommitFailure(
                    chunk_number,
                    f"record from line {record.line_number} is missing columns {missing}",
                )

        rows = [record.to_row(self.file_config) for record in records]

        logger.info(
            f"Writing {len(rows)} records to table {self.table.name} (chunk {chunk_number})"
        )

        try:
            with self.engine.begin() as connection:
                connection.execute(self.table.insert(), rows)
        except SQLAlchemyError as e:
            logger.error(f"Chunk {chunk_number} rolled back: {e}")
            raise ChunkCommitFailure(chunk_number, str(e)) from e

        logger.debug(f"Successfully wrote {len(rows)} records")
        return len(rows)
