"""Start load runs by configuration name and track their status.

The launcher answers a start request immediately, accepted or rejected, and
runs the accepted load in the background. The run's eventual COMPLETED or
FAILED state is observable separately through ``status()``. Only the last
MAX_RETAINED_RUNS results are kept; older finished runs are discarded. When
analytics are enabled they run once, after the load has completed, on the
same run thread.
"""

import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from metaloader.analytics.table_profiler import TableProfiler
from metaloader.database.database_manager import DatabaseManager
from metaloader.database.schema_provisioner import SchemaProvisioner
from metaloader.exceptions import ConfigurationError, ConfigurationMissing
from metaloader.logging_config import get_logger
from metaloader.objects.config_store import ConfigStore
from metaloader.objects.file_config import FileConfig
from metaloader.objects.run_result import RunResult, RunState
from metaloader.pipeline.orchestrator import ChunkOrchestrator

logger = get_logger(__name__)

MAX_CONCURRENT_RUNS = 4
MAX_RETAINED_RUNS = 100


class LaunchResponse(BaseModel):
    """Immediate answer to a start request."""

    accepted: bool
    message: str
    run_id: Optional[str] = None


class JobLauncher:
    """Launches load runs and exposes read-only config lookups.

    Attributes:
        config_store: Source of load configurations
        db_manager: Destination database (one engine shared by the runs)
        analytics_dir: Root directory for post-load analytics, None disables them
        parallel_chunks: Commit chunks concurrently on the shared worker pool
    """

    def __init__(
        self,
        config_store: ConfigStore,
        db_manager: DatabaseManager,
        analytics_dir: Optional[Path] = None,
        parallel_chunks: bool = False,
    ) -> None:
        self.config_store = config_store
        self.db_manager = db_manager
        self.analytics_dir = analytics_dir
        self.parallel_chunks = parallel_chunks
        self._runs: Dict[str, RunResult] = {}
        self._futures: Dict[str, Future] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=MAX_CONCURRENT_RUNS, thread_name_prefix="run"
        )

    def list_configs(self) -> List[FileConfig]:
        return self.config_store.list_active_configs()

    def get_config(self, config_name: str) -> Optional[FileConfig]:
        """Active config by name, None when not found."""
        return self.config_store.get_file_config(config_name)

    def start(self, config_name: str) -> LaunchResponse:
        """Accept or reject a start request and run accepted loads in the background."""
        try:
            file_config = self.config_store.require_file_config(config_name)
        except ConfigurationError as e:
            logger.warning(f"Rejected start request for {config_name}: {e}")
            return LaunchResponse(accepted=False, message=str(e))

        if not self.db_manager.is_valid_connection:
            message = (
                f"Failed to connect to the database. {self.db_manager.connection_error}"
            )
            logger.warning(f"Rejected start request for {config_name}: {message}")
            return LaunchResponse(accepted=False, message=message)

        run_id = uuid.uuid4().hex
        orchestrator = self._orchestrator(file_config)

        with self._lock:
            self._runs[run_id] = orchestrator.result
            self._futures[run_id] = self._executor.submit(
                self._execute, orchestrator
            )
            self._discard_finished_runs()

        logger.info(f"Started run {run_id} for config: {config_name}")
        return LaunchResponse(
            accepted=True,
            message=f"Batch job started successfully for config: {config_name}",
            run_id=run_id,
        )

    def status(self, run_id: str) -> Optional[RunResult]:
        """Current or terminal result of a run, None for an unknown run id."""
        with self._lock:
            return self._runs.get(run_id)

    def wait(self, run_id: str, timeout: Optional[float] = None) -> RunResult:
        """Block until a started run reaches a terminal state.

        Raises:
            KeyError: If the run id is unknown or its result was discarded
            concurrent.futures.TimeoutError: If the run outlasts ``timeout``
        """
        with self._lock:
            future = self._futures.get(run_id)
            result = self._runs.get(run_id)
        if future is None:
            if result is None:
                raise KeyError(f"Unknown run: {run_id}")
            return result

        result = future.result(timeout=timeout)
        with self._lock:
            self._futures.pop(run_id, None)
        return result

    def run_sync(self, config_name: str) -> RunResult:
        """Run a load in the calling thread.

        Raises:
            ConfigurationMissing: If the config is absent or inactive
            ConfigurationError: If the config store cannot be read
        """
        file_config = self.config_store.get_file_config(config_name)
        if file_config is None:
            raise ConfigurationMissing(config_name)
        return self._execute(self._orchestrator(file_config))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _discard_finished_runs(self) -> None:
        # caller holds self._lock; oldest terminal runs go first
        excess = len(self._runs) - MAX_RETAINED_RUNS
        if excess <= 0:
            return
        finished = [
            run_id for run_id, result in self._runs.items() if result.state.is_terminal
        ]
        for run_id in finished[:excess]:
            del self._runs[run_id]
            self._futures.pop(run_id, None)

    def _orchestrator(self, file_config: FileConfig) -> ChunkOrchestrator:
        return ChunkOrchestrator(
            file_config,
            self.db_manager.engine,
            provisioner=SchemaProvisioner(file_config, schema=self.db_manager.schema),
            parallel_chunks=self.parallel_chunks,
        )

    def _execute(self, orchestrator: ChunkOrchestrator) -> RunResult:
        result = orchestrator.run()

        if result.state == RunState.COMPLETED and self.analytics_dir is not None:
            self._run_analytics(orchestrator.file_config, result)

        return result

    def _run_analytics(self, file_config: FileConfig, result: RunResult) -> None:
        table_name = file_config.target_table_name
        output_dir = Path(self.analytics_dir or ".") / table_name
        profiler = TableProfiler(self.db_manager.engine, schema=self.db_manager.schema)

        logger.info(f"Starting analytics for table: {table_name}")
        try:
            profiler.profile(table_name, output_dir)

            active_tables = sorted(
                {config.target_table_name for config in self.list_configs()}
            )
            if len(active_tables) > 1:
                existing = [
                    name for name in active_tables if self.db_manager.check_table(name)
                ]
                profiler.profile_cross_table(existing, output_dir / "cross_analysis")
        except (SQLAlchemyError, ConfigurationError, OSError, ValueError) as e:
            result.analytics_error = str(e)
            logger.error(f"Analytics failed for table {table_name}: {e}")
