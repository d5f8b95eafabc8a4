"""Memory-versus-disk loading decision and temporary storage lifecycle."""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

import psutil

from .exceptions import StorageError
from .utils import format_file_size, get_logger

LOGGER = get_logger("pdf_image_extractor.storage")


@dataclass
class StoragePolicy:
    """
    Thresholds deciding when a payload is spilled to disk.

    Attributes:
        memory_fraction: Share of currently available memory a payload may use
        max_in_memory_bytes: Absolute ceiling for in-memory payloads
    """

    memory_fraction: float = 0.25
    max_in_memory_bytes: int = 512 * 1024 * 1024

    def __post_init__(self) -> None:
        if not 0 < self.memory_fraction <= 1:
            raise ValueError("memory_fraction must be in (0, 1]")
        if self.max_in_memory_bytes <= 0:
            raise ValueError("max_in_memory_bytes must be positive")

    def threshold(self, available: int) -> int:
        return min(self.max_in_memory_bytes, int(available * self.memory_fraction))


@dataclass(frozen=True)
class StorageDecision:
    use_disk: bool
    payload_size: int
    available_memory: int
    threshold: int


def available_memory() -> int:
    """Bytes of memory currently available to new allocations."""

    return int(psutil.virtual_memory().available)


def select_storage(
    payload_size: int,
    policy: Optional[StoragePolicy] = None,
    *,
    available: Optional[int] = None,
) -> StorageDecision:
    """Decide whether a payload of ``payload_size`` bytes should be loaded from disk."""

    policy = policy or StoragePolicy()
    if available is None:
        available = available_memory()
    threshold = policy.threshold(available)
    decision = StorageDecision(
        use_disk=payload_size > threshold,
        payload_size=payload_size,
        available_memory=available,
        threshold=threshold,
    )
    LOGGER.info(
        "Payload %s, in-memory limit %s: loading from %s",
        format_file_size(payload_size),
        format_file_size(threshold),
        "disk" if decision.use_disk else "memory",
    )
    return decision


class TemporaryStorage:
    """Temporary directory for one extraction call.

    Everything created through this object lives inside the directory, which
    is removed by :meth:`cleanup` (also on ``__exit__``).
    """

    def __init__(self, prefix: str = "image-processing-") -> None:
        try:
            self.directory = Path(tempfile.mkdtemp(prefix=prefix))
        except OSError as exc:
            raise StorageError(f"Unable to create temporary directory: {exc}") from exc
        self.spill_path: Optional[Path] = None

    def spill(self, payload: bytes) -> Path:
        """Write the document payload to a temporary file and return its path."""

        try:
            with tempfile.NamedTemporaryFile(
                prefix="uploaded_", suffix=".pdf", dir=self.directory, delete=False
            ) as handle:
                handle.write(payload)
                path = Path(handle.name)
        except OSError as exc:
            raise StorageError(f"Unable to write temporary file: {exc}") from exc
        self.spill_path = path
        LOGGER.debug("Spilled %s to %s", format_file_size(len(payload)), path)
        return path

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def cleanup(self) -> None:
        if self.directory.exists():
            shutil.rmtree(self.directory, ignore_errors=True)

    def __enter__(self) -> "TemporaryStorage":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.cleanup()


__all__ = [
    "StorageDecision",
    "StoragePolicy",
    "TemporaryStorage",
    "available_memory",
    "select_storage",
]
