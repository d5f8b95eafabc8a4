from __future__ import annotations

import threading
import time

import pytest

from pdf_image_extractor.exceptions import DuplicateEntryError, ExtractionInterruptedError
from pdf_image_extractor.pool import CommitSequencer, PageWorkerPool, UnorderedSequencer
from pdf_image_extractor.types import PageResult


def _ok(index: int) -> PageResult:
    return PageResult(page_number=index + 1)


def test_sequential_runs_in_order() -> None:
    seen: list[int] = []

    def task(index: int) -> PageResult:
        seen.append(index)
        return _ok(index)

    results = PageWorkerPool().run_sequential(range(4), task)

    assert seen == [0, 1, 2, 3]
    assert [result.page_number for result in results] == [1, 2, 3, 4]


@pytest.mark.parametrize("parallel", [False, True])
def test_task_failure_is_isolated(parallel: bool) -> None:
    def task(index: int) -> PageResult:
        if index == 1:
            raise RuntimeError("broken page")
        return _ok(index)

    pool = PageWorkerPool(max_workers=3)
    if parallel:
        results = pool.run_parallel(range(4), task)
    else:
        results = pool.run_sequential(range(4), task)

    assert [result.page_number for result in results] == [1, 2, 3, 4]
    assert results[1].failed
    assert results[1].error == "broken page"
    assert not any(result.failed for result in results[:1] + results[2:])


def test_duplicate_entry_error_is_not_swallowed() -> None:
    def task(index: int) -> PageResult:
        raise DuplicateEntryError("doc_page1_image1.png")

    with pytest.raises(DuplicateEntryError):
        PageWorkerPool().run_sequential(range(1), task)
    with pytest.raises(DuplicateEntryError):
        PageWorkerPool(max_workers=2).run_parallel(range(2), task)


def test_parallel_results_ordered_by_page() -> None:
    def task(index: int) -> PageResult:
        time.sleep(0.01 * (5 - index))
        return _ok(index)

    results = PageWorkerPool(max_workers=5).run_parallel(range(5), task)

    assert [result.page_number for result in results] == [1, 2, 3, 4, 5]


def test_parallel_uses_worker_threads() -> None:
    names: set[str] = set()
    lock = threading.Lock()

    def task(index: int) -> PageResult:
        with lock:
            names.add(threading.current_thread().name)
        return _ok(index)

    PageWorkerPool(max_workers=2).run_parallel(range(6), task)

    assert names
    assert all(name.startswith("page-worker") for name in names)


def test_parallel_with_no_pages() -> None:
    assert PageWorkerPool().run_parallel([], _ok) == []


def test_parallel_timeout_aborts_and_calls_hook() -> None:
    release = threading.Event()
    aborted: list[bool] = []

    def task(index: int) -> PageResult:
        release.wait(5)
        return _ok(index)

    def on_abort() -> None:
        aborted.append(True)
        release.set()

    pool = PageWorkerPool(max_workers=2, timeout=0.05, grace_period=5)
    with pytest.raises(ExtractionInterruptedError, match="Timed out"):
        pool.run_parallel(range(6), task, on_abort=on_abort)

    assert aborted == [True]


def test_sequential_timeout() -> None:
    def task(index: int) -> PageResult:
        time.sleep(0.05)
        return _ok(index)

    pool = PageWorkerPool(timeout=0.01)
    with pytest.raises(ExtractionInterruptedError, match="before page 2"):
        pool.run_sequential(range(3), task)


def test_sequential_keyboard_interrupt() -> None:
    def task(index: int) -> PageResult:
        raise KeyboardInterrupt

    with pytest.raises(ExtractionInterruptedError):
        PageWorkerPool().run_sequential(range(2), task)


def test_commit_sequencer_admits_pages_in_order() -> None:
    sequencer = CommitSequencer()
    committed: list[int] = []
    lock = threading.Lock()

    def task(index: int) -> PageResult:
        # Higher pages finish preparing first.
        time.sleep(0.01 * (6 - index))
        try:
            sequencer.wait_turn(index)
            with lock:
                committed.append(index)
        finally:
            sequencer.advance(index)
        return _ok(index)

    PageWorkerPool(max_workers=6).run_parallel(range(6), task)

    assert committed == [0, 1, 2, 3, 4, 5]


def test_commit_sequencer_skips_finished_pages() -> None:
    sequencer = CommitSequencer()
    sequencer.advance(1)
    sequencer.advance(0)

    sequencer.wait_turn(2)


def test_commit_sequencer_abort_wakes_waiters() -> None:
    sequencer = CommitSequencer()
    errors: list[BaseException] = []

    def waiter() -> None:
        try:
            sequencer.wait_turn(3)
        except ExtractionInterruptedError as exc:
            errors.append(exc)

    thread = threading.Thread(target=waiter)
    thread.start()
    time.sleep(0.05)
    sequencer.abort()
    thread.join(2)

    assert not thread.is_alive()
    assert len(errors) == 1


def test_unordered_sequencer_never_blocks() -> None:
    sequencer = UnorderedSequencer()

    sequencer.wait_turn(10)
    sequencer.advance(10)
    sequencer.abort()
    sequencer.wait_turn(11)
