from __future__ import annotations

import threading
import time

from pdf_image_extractor.fingerprint import DIGEST_SIZE, fingerprint
from pdf_image_extractor.registry import DedupRegistry, NullRegistry, create_registry


def test_fingerprint_is_sha256_sized_and_stable() -> None:
    first = fingerprint(b"pixels")
    assert len(first) == DIGEST_SIZE
    assert first == fingerprint(b"pixels")
    assert first != fingerprint(b"other pixels")


def test_try_claim_first_caller_wins() -> None:
    registry = DedupRegistry()
    digest = fingerprint(b"a")

    assert registry.try_claim(digest) is True
    registry.confirm(digest)

    assert registry.try_claim(digest) is False
    assert digest in registry
    assert len(registry) == 1


def test_release_allows_a_new_claim() -> None:
    registry = DedupRegistry()
    digest = fingerprint(b"a")
    registry.try_claim(digest)

    registry.release(digest)

    assert digest not in registry
    assert registry.try_claim(digest) is True


def _claim_in_thread(registry: DedupRegistry, digest: bytes) -> tuple[threading.Thread, list[bool]]:
    results: list[bool] = []
    thread = threading.Thread(target=lambda: results.append(registry.try_claim(digest)))
    thread.start()
    return thread, results


def test_pending_claim_is_handed_over_on_release() -> None:
    registry = DedupRegistry()
    digest = fingerprint(b"a")
    registry.try_claim(digest)

    thread, results = _claim_in_thread(registry, digest)
    time.sleep(0.05)
    assert results == []

    registry.release(digest)
    thread.join(2)

    assert results == [True]


def test_pending_claim_resolves_to_duplicate_on_confirm() -> None:
    registry = DedupRegistry()
    digest = fingerprint(b"a")
    registry.try_claim(digest)

    thread, results = _claim_in_thread(registry, digest)
    time.sleep(0.05)
    registry.confirm(digest)
    thread.join(2)

    assert results == [False]


def test_try_claim_is_atomic_across_threads() -> None:
    registry = DedupRegistry()
    digest = fingerprint(b"shared")
    workers = 16
    barrier = threading.Barrier(workers)
    results: list[bool] = []
    results_lock = threading.Lock()

    def claim() -> None:
        barrier.wait()
        won = registry.try_claim(digest)
        if won:
            registry.confirm(digest)
        with results_lock:
            results.append(won)

    threads = [threading.Thread(target=claim) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert results.count(False) == workers - 1


def test_null_registry_accepts_everything() -> None:
    registry = NullRegistry()
    digest = fingerprint(b"a")

    assert registry.try_claim(digest) is True
    registry.confirm(digest)
    assert registry.try_claim(digest) is True
    assert len(registry) == 0


def test_create_registry_follows_dedup_flag() -> None:
    assert isinstance(create_registry(True), DedupRegistry)
    assert isinstance(create_registry(False), NullRegistry)
