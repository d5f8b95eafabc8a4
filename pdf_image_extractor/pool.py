"""Scheduling of page tasks on the calling thread or a bounded thread pool."""

from __future__ import annotations

import os
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Condition
from typing import Callable, Dict, Iterable, List, Optional, Set

from .exceptions import DuplicateEntryError, ExtractionInterruptedError
from .types import PageResult
from .utils import get_logger

LOGGER = get_logger("pdf_image_extractor.pool")

PageTask = Callable[[int], PageResult]


class CommitSequencer:
    """Turnstile admitting page commits in ascending page order.

    A page is admitted once every lower page has called :meth:`advance`,
    whether it committed images or failed early.
    """

    def __init__(self, first: int = 0) -> None:
        self._next = first
        self._finished: Set[int] = set()
        self._aborted = False
        self._condition = Condition()

    def wait_turn(self, index: int) -> None:
        with self._condition:
            while not self._aborted and self._next != index:
                self._condition.wait()
            if self._aborted:
                raise ExtractionInterruptedError(
                    f"Extraction aborted before page {index + 1} could be committed."
                )

    def advance(self, index: int) -> None:
        with self._condition:
            self._finished.add(index)
            while self._next in self._finished:
                self._finished.discard(self._next)
                self._next += 1
            self._condition.notify_all()

    def abort(self) -> None:
        with self._condition:
            self._aborted = True
            self._condition.notify_all()


class UnorderedSequencer:
    """Sequencer that admits every page immediately."""

    def wait_turn(self, index: int) -> None:
        return None

    def advance(self, index: int) -> None:
        return None

    def abort(self) -> None:
        return None


class PageWorkerPool:
    """Run one task per page, sequentially or on a bounded thread pool.

    Task exceptions are logged and turned into failed :class:`PageResult`
    values; they never cancel sibling pages. A :class:`DuplicateEntryError`
    means entry naming is broken and is re-raised. Timeouts and interrupts abort
    the whole run with :class:`ExtractionInterruptedError`.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        *,
        timeout: Optional[float] = None,
        grace_period: float = 60.0,
    ) -> None:
        self.max_workers = max_workers or os.cpu_count() or 1
        self.timeout = timeout
        self.grace_period = grace_period

    def run_sequential(self, page_indices: Iterable[int], task: PageTask) -> List[PageResult]:
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        results: List[PageResult] = []
        for index in page_indices:
            if deadline is not None and time.monotonic() > deadline:
                raise ExtractionInterruptedError(
                    f"Timed out after {self.timeout}s before page {index + 1}."
                )
            try:
                results.append(self._guard(task, index))
            except KeyboardInterrupt as exc:
                raise ExtractionInterruptedError(
                    f"Extraction interrupted on page {index + 1}."
                ) from exc
        return results

    def run_parallel(
        self,
        page_indices: Iterable[int],
        task: PageTask,
        *,
        on_abort: Optional[Callable[[], None]] = None,
    ) -> List[PageResult]:
        indices = list(page_indices)
        if not indices:
            return []

        workers = min(self.max_workers, len(indices))
        LOGGER.info("Processing %d pages on %d worker threads", len(indices), workers)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="page-worker")
        futures: Dict[Future, int] = {executor.submit(task, index): index for index in indices}

        try:
            _, pending = wait(futures, timeout=self.timeout)
        except KeyboardInterrupt as exc:
            self._abort(executor, futures, on_abort)
            raise ExtractionInterruptedError(
                "Extraction interrupted while waiting for page tasks."
            ) from exc

        if pending:
            LOGGER.warning(
                "Timed out after %ss with %d page task(s) unfinished", self.timeout, len(pending)
            )
            self._abort(executor, futures, on_abort)
            raise ExtractionInterruptedError(
                f"Timed out after {self.timeout}s with {len(pending)} page task(s) unfinished."
            )

        executor.shutdown(wait=True)
        by_index = {index: self._collect(future, index) for future, index in futures.items()}
        return [by_index[index] for index in indices]

    def _abort(
        self,
        executor: ThreadPoolExecutor,
        futures: Dict[Future, int],
        on_abort: Optional[Callable[[], None]],
    ) -> None:
        executor.shutdown(wait=False, cancel_futures=True)
        if on_abort is not None:
            on_abort()
        running = [future for future in futures if not future.done()]
        if not running:
            return
        _, still_running = wait(running, timeout=self.grace_period)
        if still_running:
            LOGGER.error(
                "%d page task(s) still running after %ss grace period; abandoning them",
                len(still_running),
                self.grace_period,
            )

    @staticmethod
    def _guard(task: PageTask, index: int) -> PageResult:
        try:
            return task(index)
        except DuplicateEntryError:
            raise
        except Exception as exc:
            LOGGER.exception("Error extracting images from page %d", index + 1)
            return PageResult(page_number=index + 1, error=str(exc))

    @staticmethod
    def _collect(future: Future, index: int) -> PageResult:
        try:
            return future.result()
        except DuplicateEntryError:
            raise
        except Exception as exc:
            LOGGER.error("Error extracting images from page %d: %s", index + 1, exc, exc_info=exc)
            return PageResult(page_number=index + 1, error=str(exc))


__all__ = ["CommitSequencer", "PageTask", "PageWorkerPool", "UnorderedSequencer"]
