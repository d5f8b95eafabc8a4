"""Document-wide registry of archived image fingerprints."""

from __future__ import annotations

from threading import Condition
from typing import Set, Union


class DedupRegistry:
    """Thread-safe fingerprint set with an atomic insert-if-absent.

    A successful :meth:`try_claim` leaves the fingerprint pending until the
    claimant calls :meth:`confirm` (the image was archived) or :meth:`release`
    (it was not). Other claimants of a pending fingerprint block until then,
    so a released claim is handed to the next identical image instead of
    being lost.
    """

    def __init__(self) -> None:
        self._committed: Set[bytes] = set()
        self._pending: Set[bytes] = set()
        self._condition = Condition()

    def try_claim(self, fingerprint: bytes) -> bool:
        """Return ``True`` if the caller now owns ``fingerprint``, ``False`` if it was archived."""

        with self._condition:
            while fingerprint in self._pending:
                self._condition.wait()
            if fingerprint in self._committed:
                return False
            self._pending.add(fingerprint)
            return True

    def confirm(self, fingerprint: bytes) -> None:
        """Mark a claimed fingerprint as archived."""

        with self._condition:
            self._pending.discard(fingerprint)
            self._committed.add(fingerprint)
            self._condition.notify_all()

    def release(self, fingerprint: bytes) -> None:
        """Withdraw a claim whose image never made it into the archive."""

        with self._condition:
            self._pending.discard(fingerprint)
            self._condition.notify_all()

    def __contains__(self, fingerprint: object) -> bool:
        with self._condition:
            return fingerprint in self._committed or fingerprint in self._pending

    def __len__(self) -> int:
        with self._condition:
            return len(self._committed) + len(self._pending)


class NullRegistry:
    """Registry used when deduplication is disabled: every claim succeeds."""

    def try_claim(self, fingerprint: bytes) -> bool:
        return True

    def confirm(self, fingerprint: bytes) -> None:
        return None

    def release(self, fingerprint: bytes) -> None:
        return None

    def __contains__(self, fingerprint: object) -> bool:
        return False

    def __len__(self) -> int:
        return 0


Registry = Union[DedupRegistry, NullRegistry]


def create_registry(deduplicate: bool) -> Registry:
    return DedupRegistry() if deduplicate else NullRegistry()


__all__ = ["DedupRegistry", "NullRegistry", "Registry", "create_registry"]
