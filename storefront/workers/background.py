# File: storefront/workers/background.py
import atexit
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)

class BackgroundDispatcher:
    """
    Fire-and-forget execution of side effects (emails, analytics rows).

    Submitted callables run on a worker thread. Their exceptions are logged
    here and never reach the submitter; nothing is retried.
    """

    def __init__(self, max_workers: int = 4):
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        atexit.register(self.shutdown)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="storefront-bg"
                )
                logger.info(f"Background dispatcher started with {self.max_workers} workers")
            return self._executor

    @staticmethod
    def _run(fn: Callable, args: tuple, description: str) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.error(f"Background task '{description}' failed: {e}")

    def submit(self, fn: Callable, *args, description: str = "") -> Optional[Future]:
        description = description or getattr(fn, "__name__", "task")
        try:
            return self._get_executor().submit(self._run, fn, args, description)
        except RuntimeError as e:
            # Executor already shut down (process exiting)
            logger.error(f"Dropped background task '{description}': {e}")
            return None

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.info("Background dispatcher stopped")
