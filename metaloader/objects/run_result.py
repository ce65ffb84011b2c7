"""Run state and result models for load runs."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class RunState(str, Enum):
    """Lifecycle of one load run.

    NOT_STARTED -> PROVISIONING -> LOADING -> COMPLETED | FAILED
    """

    NOT_STARTED = "NOT_STARTED"
    PROVISIONING = "PROVISIONING"
    LOADING = "LOADING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED)


class RunResult(BaseModel):
    """Outcome and counters of one load run.

    Attributes:
        config_name: Load configuration that was run
        target_table_name: Destination table
        state: Current or terminal run state
        lines_read: Data lines consumed from the source file
        records_accepted: Records that passed validation
        records_skipped: Records dropped by validation
        chunks_committed: Chunks whose transaction committed
        rows_committed: Rows inside committed chunks
        committed_lines: Source lines covered by committed chunks
        error_type: Exception class name of a fatal error
        error: Message of a fatal error
        analytics_error: Message of a failed post-load analytics step
        started_at: Run start time (UTC)
        finished_at: Run end time (UTC)
    """

    config_name: str
    target_table_name: str
    state: RunState = RunState.NOT_STARTED
    lines_read: int = 0
    records_accepted: int = 0
    records_skipped: int = 0
    chunks_committed: int = 0
    rows_committed: int = 0
    committed_lines: int = 0
    error_type: Optional[str] = None
    error: Optional[str] = None
    analytics_error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.COMPLETED
