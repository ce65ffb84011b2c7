"""Chunked load driver.

One run reads the source file record by record, routes each record through
the processor, buffers accepted records, and hands each full buffer (and the
final partial one) to the writer as one atomic chunk. Provisioning runs once
before the first record is read.

Run states::

    NOT_STARTED -> PROVISIONING -> LOADING -> COMPLETED
                                           \\-> FAILED

Any open, parse, provisioning or commit error stops the run and marks it
FAILED. Chunks committed before the failure stay committed; there is no
retry.
"""

import threading
from concurrent.futures import Future, wait
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import Table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from metaloader.database.batch_writer import BatchWriter
from metaloader.database.schema_provisioner import SchemaProvisioner
from metaloader.exceptions import MetaloaderError
from metaloader.logging_config import get_logger
from metaloader.objects.data_record import GenericDataRecord
from metaloader.objects.file_config import FileConfig
from metaloader.objects.run_result import RunResult, RunState
from metaloader.pipeline.processor import RecordProcessor
from metaloader.pipeline.reader import DelimitedRecordReader
from metaloader.pipeline.worker_pool import BoundedWorkerPool, get_worker_pool

logger = get_logger(__name__)

WriterFactory = Callable[[Engine, Table, FileConfig], BatchWriter]

# (chunk number, records, source lines consumed when the chunk was closed)
Chunk = Tuple[int, List[GenericDataRecord], int]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChunkOrchestrator:
    """Drives reader -> processor -> buffer -> writer for one run.

    Attributes:
        file_config: Configuration of the load job
        engine: Destination database engine (one per run)
        parallel_chunks: Commit chunks concurrently on the worker pool;
            cross-chunk ordering is then not guaranteed
        result: Live state and counters of the run
    """

    def __init__(
        self,
        file_config: FileConfig,
        engine: Engine,
        reader: Optional[DelimitedRecordReader] = None,
        processor: Optional[RecordProcessor] = None,
        provisioner: Optional[SchemaProvisioner] = None,
        writer_factory: WriterFactory = BatchWriter,
        parallel_chunks: bool = False,
        pool: Optional[BoundedWorkerPool] = None,
    ) -> None:
        self.file_config = file_config
        self.engine = engine
        self.reader = reader or DelimitedRecordReader(file_config)
        self.processor = processor or RecordProcessor()
        self.processor.configure(file_config)
        self.provisioner = provisioner or SchemaProvisioner(file_config)
        self.writer_factory = writer_factory
        self.parallel_chunks = parallel_chunks
        self.pool = pool
        self._counter_lock = threading.Lock()
        self.result = RunResult(
            config_name=file_config.config_name,
            target_table_name=file_config.target_table_name,
        )

    def run(self) -> RunResult:
        """Execute the run to a terminal state.

        Fatal errors are recorded on the returned result rather than raised.
        """
        if self.result.state != RunState.NOT_STARTED:
            raise RuntimeError(f"Run already {self.result.state.value}")

        self.result.started_at = _utcnow()
        logger.info(
            f"Starting load of {self.file_config.source_file_path} "
            f"into {self.file_config.target_table_name} "
            f"(chunk size {self.file_config.chunk_size})"
        )

        try:
            self._transition(RunState.PROVISIONING)
            table = self.provisioner.provision(self.engine)
            writer = self.writer_factory(self.engine, table, self.file_config)

            self._transition(RunState.LOADING)
            with self.reader:
                if self.parallel_chunks:
                    self._load_parallel(writer)
                else:
                    self._load_sequential(writer)

            self._transition(RunState.COMPLETED)
        except (MetaloaderError, SQLAlchemyError) as e:
            self._fail(e)
            logger.error(f"Load {self.file_config.config_name} failed: {e}")
        except Exception as e:
            self._fail(e)
            logger.exception(f"Load {self.file_config.config_name} failed unexpectedly")
        finally:
            self.result.lines_read = self.reader.lines_read
            self.result.finished_at = _utcnow()

        logger.info(
            f"Load {self.file_config.config_name} {self.result.state.value}: "
            f"{self.result.rows_committed} rows in {self.result.chunks_committed} chunks, "
            f"{self.result.records_skipped} skipped"
        )
        return self.result

    def _chunks(self) -> Iterator[Chunk]:
        """Buffer accepted records into chunks of at most chunk_size."""
        chunk_size = self.file_config.chunk_size
        buffer: List[GenericDataRecord] = []
        chunk_number = 0

        for record in self.reader:
            processed = self.processor.process(record)
            if processed is None:
                self.result.records_skipped += 1
                continue

            self.result.records_accepted += 1
            buffer.append(processed)

            if len(buffer) >= chunk_size:
                chunk_number += 1
                yield chunk_number, buffer, self.reader.lines_read
                buffer = []

        if buffer:
            chunk_number += 1
            yield chunk_number, buffer, self.reader.lines_read

    def _load_sequential(self, writer: BatchWriter) -> None:
        for chunk_number, records, position in self._chunks():
            self._commit(writer, chunk_number, records)
            self.result.committed_lines = position

        # Lines read after the last committed chunk were all skipped
        self.result.committed_lines = self.reader.lines_read

    def _load_parallel(self, writer: BatchWriter) -> None:
        pool = self.pool or get_worker_pool()
        futures: Dict[int, Future] = {}
        positions: Dict[int, int] = {}

        try:
            for chunk_number, records, position in self._chunks():
                if any(f.done() and f.exception() for f in futures.values()):
                    break
                positions[chunk_number] = position
                futures[chunk_number] = pool.submit(
                    self._commit, writer, chunk_number, records
                )
        finally:
            wait(list(futures.values()))

            # Durable position: the contiguous prefix of committed chunks
            for chunk_number in sorted(futures):
                if futures[chunk_number].exception() is not None:
                    break
                self.result.committed_lines = positions[chunk_number]

        for chunk_number in sorted(futures):
            error = futures[chunk_number].exception()
            if error is not None:
                raise error

        self.result.committed_lines = self.reader.lines_read

    def _commit(
        self, writer: BatchWriter, chunk_number: int, records: List[GenericDataRecord]
    ) -> None:
        written = writer.write_chunk(records, chunk_number)
        with self._counter_lock:
            self.result.chunks_committed += 1
            self.result.rows_committed += written
        logger.info(
            f"Committed chunk {chunk_number} of {self.file_config.config_name}: "
            f"{written} rows"
        )

    def _transition(self, state: RunState) -> None:
        logger.debug(
            f"Run {self.file_config.config_name}: {self.result.state.value} -> {state.value}"
        )
        self.result.state = state

    def _fail(self, error: BaseException) -> None:
        self.result.state = RunState.FAILED
        self.result.error_type = type(error).__name__
        self.result.error = str(error)
