"""
Type definitions and dataclasses for PDF Image Extractor.

This module defines data structures used throughout the library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .codec import ImageFormat

MB = 1024 * 1024


class ExecutionMode(str, Enum):
    """How page tasks are scheduled."""

    AUTO = "auto"
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class ImageStatus(str, Enum):
    """Outcome of one embedded image."""

    EXTRACTED = "extracted"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"


@dataclass
class ExtractionOptions:
    """
    Options controlling a single extraction call.

    Attributes:
        image_format: Target raster format for archived images
        extension: Entry name extension, the format identifier as the caller
            spelled it (``jpg`` stays ``jpg``); derived from ``image_format``
        deduplicate: Drop images whose re-encoded bytes were already archived
        mode: Force sequential or parallel execution, or choose automatically
        max_workers: Upper bound on worker threads (defaults to CPU count)
        parallel_page_threshold: Pages above which AUTO picks parallel mode
        parallel_size_threshold: Payload bytes above which AUTO picks parallel mode
        timeout: Seconds to wait for parallel page tasks before aborting
        grace_period: Seconds in-flight tasks may finish after an abort
        ordered_commit: Commit pages in page order so results are deterministic
        canonicalize: Convert every image to RGB/RGBA before encoding
        compresslevel: Deflate level for archive entries (0-9)
        password: Password for encrypted PDFs
    """

    image_format: Union[ImageFormat, str] = ImageFormat.PNG
    deduplicate: bool = True
    mode: Union[ExecutionMode, str] = ExecutionMode.AUTO
    max_workers: Optional[int] = None
    parallel_page_threshold: int = 20
    parallel_size_threshold: int = 10 * MB
    timeout: Optional[float] = None
    grace_period: float = 60.0
    ordered_commit: bool = True
    canonicalize: bool = False
    compresslevel: int = 9
    password: Optional[str] = None
    extension: str = field(init=False, default="")

    def __post_init__(self) -> None:
        if isinstance(self.image_format, ImageFormat):
            self.extension = self.image_format.extension
        else:
            self.extension = str(self.image_format).strip().lower().lstrip(".")
        self.image_format = ImageFormat.parse(self.image_format)
        try:
            self.mode = ExecutionMode(str(getattr(self.mode, "value", self.mode)).lower())
        except ValueError as exc:
            raise ValueError(f"Unknown execution mode: {self.mode}") from exc
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.parallel_page_threshold < 0:
            raise ValueError("parallel_page_threshold must be >= 0")
        if self.parallel_size_threshold < 0:
            raise ValueError("parallel_size_threshold must be >= 0")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.grace_period < 0:
            raise ValueError("grace_period must be >= 0")
        if not 0 <= self.compresslevel <= 9:
            raise ValueError("compresslevel must be between 0 and 9")


@dataclass
class EmbeddedImage:
    """
    One decoded and re-encoded image object of a page.

    Attributes:
        page_number: 1-based page number
        source_index: 0-based position of the image among the page's resources
        key: Resource key the document backend uses for the image
        data: Image bytes encoded in the target format
        width: Width in pixels
        height: Height in pixels
        mode: Pillow mode of the decoded image
    """

    page_number: int
    source_index: int
    key: str
    data: bytes
    width: int = 0
    height: int = 0
    mode: str = ""


@dataclass
class ImageOutcome:
    """What happened to one embedded image."""

    page_number: int
    source_index: int
    status: ImageStatus
    entry_name: Optional[str] = None
    reason: Optional[str] = None
    fingerprint: Optional[str] = None
    size: int = 0


@dataclass
class PageResult:
    """
    Result of a page task.

    ``error`` is set when the page stopped early; outcomes recorded before the
    failure are kept.
    """

    page_number: int
    outcomes: List[ImageOutcome] = field(default_factory=list)
    error: Optional[str] = None

    def _count(self, status: ImageStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def extracted(self) -> int:
        return self._count(ImageStatus.EXTRACTED)

    @property
    def duplicates(self) -> int:
        return self._count(ImageStatus.DUPLICATE)

    @property
    def skipped(self) -> int:
        return self._count(ImageStatus.SKIPPED)

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class ExtractionResult:
    """
    Result of an extraction call.

    Attributes:
        archive: Finished ZIP archive bytes
        filename: Suggested filename for the archive
        entries: Archive entry names in write order
        pages: Per-page results ordered by page number
        mode: Execution mode that was actually used
        used_disk: Whether the payload was spilled to a temporary file
        image_format: Target format of the archived images
    """

    archive: bytes
    filename: str
    entries: List[str]
    pages: List[PageResult]
    mode: ExecutionMode
    used_disk: bool
    image_format: ImageFormat

    @property
    def extracted(self) -> int:
        return sum(page.extracted for page in self.pages)

    @property
    def duplicates(self) -> int:
        return sum(page.duplicates for page in self.pages)

    @property
    def skipped(self) -> int:
        return sum(page.skipped for page in self.pages)

    @property
    def failed_pages(self) -> List[PageResult]:
        return [page for page in self.pages if page.failed]

    @property
    def outcomes(self) -> List[ImageOutcome]:
        return [outcome for page in self.pages for outcome in page.outcomes]

    def write_to(self, destination: Union[str, Path]) -> Path:
        """Write the archive to *destination* and return the path."""

        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.archive)
        return path

    def __str__(self) -> str:
        return (
            "ExtractionResult(entries={entries}, duplicates={duplicates}, "
            "skipped={skipped}, failed_pages={failed})"
        ).format(
            entries=len(self.entries),
            duplicates=self.duplicates,
            skipped=self.skipped,
            failed=len(self.failed_pages),
        )
