"""Process-wide bounded worker pool for load work.

When parallel chunk commits are enabled, chunks of every run execute on
one shared thread pool. The number of submitted-but-unfinished tasks is
capped; a submitter blocks while the queue is full.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from metaloader.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_WORKERS = 8
DEFAULT_QUEUE_CAPACITY = 100
THREAD_NAME_PREFIX = "batch"


class BoundedWorkerPool:
    """ThreadPoolExecutor with a bounded task queue.

    Attributes:
        max_workers: Maximum worker threads
        queue_capacity: Maximum tasks waiting for a worker
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
    ) -> None:
        if max_workers < 1 or queue_capacity < 0:
            raise ValueError("max_workers must be >= 1 and queue_capacity >= 0")

        self.max_workers = max_workers
        self.queue_capacity = queue_capacity
        self._slots = threading.BoundedSemaphore(max_workers + queue_capacity)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=THREAD_NAME_PREFIX
        )

    def submit(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Submit a task, blocking while the pool and its queue are full."""
        self._slots.acquire()
        try:
            future = self._executor.submit(func, *args, **kwargs)
        except BaseException:
            self._slots.release()
            raise

        future.add_done_callback(lambda _: self._slots.release())
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_pool: Optional[BoundedWorkerPool] = None
_pool_lock = threading.Lock()


def get_worker_pool() -> BoundedWorkerPool:
    """Get or create the process-wide worker pool."""
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = BoundedWorkerPool()
            logger.debug(
                f"Worker pool started: {_pool.max_workers} workers, "
                f"queue capacity {_pool.queue_capacity}"
            )
        return _pool


def shutdown_worker_pool(wait: bool = True) -> None:
    """Shut down the process-wide pool; the next get_worker_pool() starts a new one."""
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.shutdown(wait=wait)
            _pool = None
