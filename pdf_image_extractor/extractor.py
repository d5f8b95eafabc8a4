"""Top-level extraction driver built around :class:`PageWorkerPool`."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Any, BinaryIO, Callable, List, Optional, Tuple, Union

from .archive import ArchiveWriter, entry_name
from .backends import PypdfBackend
from .backends.base import BackendDocument, PDFBackend
from .codec import ImageFormat
from .enumerator import iter_page_images
from .exceptions import (
    ArchiveError,
    DuplicateEntryError,
    ImageExtractorException,
    PageEnumerationError,
    StorageError,
)
from .fingerprint import fingerprint
from .pool import CommitSequencer, PageWorkerPool, UnorderedSequencer
from .registry import NullRegistry, Registry, create_registry
from .storage import StoragePolicy, TemporaryStorage, select_storage
from .types import (
    EmbeddedImage,
    ExecutionMode,
    ExtractionOptions,
    ExtractionResult,
    ImageOutcome,
    ImageStatus,
    PageResult,
)
from .utils import archive_filename, format_file_size, get_logger, simple_basename

LOGGER = get_logger("pdf_image_extractor.extractor")

ProgressCallback = Callable[[int, int], None]


class ExtractionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SEQUENTIAL = "sequential-extracting"
    PARALLEL = "parallel-extracting"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


def select_mode(num_pages: int, payload_size: int, options: ExtractionOptions) -> ExecutionMode:
    """Pick sequential or parallel execution for a document."""

    if options.mode is not ExecutionMode.AUTO:
        return options.mode  # type: ignore[return-value]
    if (
        num_pages > options.parallel_page_threshold
        or payload_size > options.parallel_size_threshold
    ):
        return ExecutionMode.PARALLEL
    return ExecutionMode.SEQUENTIAL


class _PageJob:
    """Per-call state shared by every page task."""

    def __init__(
        self,
        document: BackendDocument,
        *,
        basename: str,
        image_format: ImageFormat,
        extension: str,
        registry: Registry,
        archive: ArchiveWriter,
        ordered: bool,
        canonicalize: bool,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.document = document
        self.basename = basename
        self.image_format = image_format
        self.extension = extension
        self.registry = registry
        # Without deduplication images are neither hashed nor claimed.
        self.hashing = not isinstance(registry, NullRegistry)
        self.archive = archive
        self.sequencer = CommitSequencer() if ordered else UnorderedSequencer()
        self.canonicalize = canonicalize
        self.progress_callback = progress_callback
        self._completed = 0
        self._progress_lock = Lock()

    def __call__(self, page_index: int) -> PageResult:
        result = PageResult(page_number=page_index + 1)
        try:
            prepared = self._prepare(page_index, result)
            self.sequencer.wait_turn(page_index)
            self._commit(prepared, result)
        finally:
            self.sequencer.advance(page_index)
            self._report_progress()
        result.outcomes.sort(key=lambda outcome: outcome.source_index)
        return result

    def abort(self) -> None:
        self.sequencer.abort()
        self.archive.abandon()

    def _prepare(
        self, page_index: int, result: PageResult
    ) -> List[Tuple[EmbeddedImage, Optional[bytes]]]:
        prepared: List[Tuple[EmbeddedImage, Optional[bytes]]] = []
        try:
            for item in iter_page_images(
                self.document,
                page_index,
                self.image_format,
                canonicalize=self.canonicalize,
            ):
                if isinstance(item, ImageOutcome):
                    result.outcomes.append(item)
                    continue
                digest = fingerprint(item.data) if self.hashing else None
                prepared.append((item, digest))
        except PageEnumerationError as exc:
            LOGGER.error("Skipping page %d: %s", result.page_number, exc)
            result.error = str(exc)
        except Exception as exc:
            LOGGER.exception("Error extracting images from page %d", result.page_number)
            result.error = f"unexpected error: {exc}"
        return prepared

    def _commit(
        self, prepared: List[Tuple[EmbeddedImage, Optional[bytes]]], result: PageResult
    ) -> None:
        ordinal = 0
        for image, digest in prepared:
            outcome = ImageOutcome(
                page_number=image.page_number,
                source_index=image.source_index,
                status=ImageStatus.DUPLICATE,
                fingerprint=digest.hex() if digest is not None else None,
                size=len(image.data),
            )
            if digest is not None and not self.registry.try_claim(digest):
                LOGGER.debug(
                    "Duplicate image %s on page %d skipped", image.key, image.page_number
                )
                result.outcomes.append(outcome)
                continue

            name = entry_name(self.basename, image.page_number, ordinal + 1, self.extension)
            try:
                self.archive.append(name, image.data)
            except ArchiveError as exc:
                if digest is not None:
                    self.registry.release(digest)
                if isinstance(exc, DuplicateEntryError):
                    raise
                LOGGER.error("Could not add %s to archive: %s", name, exc)
                outcome.status = ImageStatus.SKIPPED
                outcome.reason = f"archive write failed: {exc}"
                result.outcomes.append(outcome)
                continue

            if digest is not None:
                self.registry.confirm(digest)
            ordinal += 1
            LOGGER.info("Added image %s to archive for page %d", name, image.page_number)
            outcome.status = ImageStatus.EXTRACTED
            outcome.entry_name = name
            result.outcomes.append(outcome)

    def _report_progress(self) -> None:
        if self.progress_callback is None:
            return
        with self._progress_lock:
            self._completed += 1
            self.progress_callback(self._completed, self.document.num_pages)


class ImageExtractor:
    """Extract the embedded images of a PDF into one ZIP archive."""

    def __init__(
        self,
        options: Optional[ExtractionOptions] = None,
        *,
        backend: Optional[PDFBackend] = None,
        storage_policy: Optional[StoragePolicy] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.options = options or ExtractionOptions()
        self.backend: PDFBackend = backend or PypdfBackend()
        self.storage_policy = storage_policy or StoragePolicy()
        self.progress_callback = progress_callback
        self.state = ExtractionState.IDLE

    def _transition(self, state: ExtractionState) -> None:
        LOGGER.debug("Extraction state %s -> %s", self.state.value, state.value)
        self.state = state

    @staticmethod
    def _read_payload(source: Union[bytes, bytearray, BinaryIO]) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        if hasattr(source, "read"):
            return source.read()
        raise TypeError(f"Unsupported PDF source: {type(source).__name__}")

    def extract_file(self, pdf_path: Union[str, Path]) -> ExtractionResult:
        path = Path(pdf_path)
        try:
            payload = path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Unable to read PDF file: {pdf_path}. Error: {exc}") from exc
        return self.extract(payload, filename=path.name)

    def extract(
        self,
        source: Union[bytes, bytearray, BinaryIO],
        filename: Optional[str] = None,
    ) -> ExtractionResult:
        """Extract images from *source* and return the finished archive.

        Raises:
            InvalidPDFError: If the document cannot be opened
            EncryptedPDFError: If the document is encrypted and cannot be unlocked
            StorageError: If temporary storage cannot be created
            ArchiveError: If the archive cannot be opened or finalized
            ExtractionInterruptedError: On timeout or interruption
        """
        options = self.options
        image_format: ImageFormat = options.image_format  # type: ignore[assignment]
        payload = self._read_payload(source)
        basename = simple_basename(filename)
        LOGGER.info(
            "Starting image extraction for file: %s with format: %s",
            filename or "<unnamed>",
            image_format.value,
        )

        self.state = ExtractionState.IDLE
        self._transition(ExtractionState.LOADING)
        storage: Optional[TemporaryStorage] = None
        document: Optional[BackendDocument] = None
        archive: Optional[ArchiveWriter] = None
        archive_stream: Optional[BinaryIO] = None
        try:
            decision = select_storage(len(payload), self.storage_policy)
            storage = TemporaryStorage()
            if decision.use_disk:
                pdf_path = storage.spill(payload)
                document = self.backend.load(pdf_path, password=options.password)
                try:
                    archive_stream = storage.path_for("extracted-images.zip").open("w+b")
                except OSError as exc:
                    raise StorageError(f"Unable to create archive file: {exc}") from exc
            else:
                document = self.backend.load(payload, password=options.password)
            archive = ArchiveWriter(archive_stream, compresslevel=options.compresslevel)

            mode = select_mode(document.num_pages, len(payload), options)
            LOGGER.info(
                "Document has %d pages (%s); using %s mode",
                document.num_pages,
                format_file_size(len(payload)),
                mode.value,
            )
            job = _PageJob(
                document,
                basename=basename,
                image_format=image_format,
                extension=options.extension,
                registry=create_registry(options.deduplicate),
                archive=archive,
                ordered=options.ordered_commit,
                canonicalize=options.canonicalize,
                progress_callback=self.progress_callback,
            )
            pool = PageWorkerPool(
                options.max_workers,
                timeout=options.timeout,
                grace_period=options.grace_period,
            )
            pages_to_process = range(document.num_pages)
            if mode is ExecutionMode.PARALLEL:
                self._transition(ExtractionState.PARALLEL)
                pages = pool.run_parallel(pages_to_process, job, on_abort=job.abort)
            else:
                self._transition(ExtractionState.SEQUENTIAL)
                pages = pool.run_sequential(pages_to_process, job)

            self._transition(ExtractionState.FINALIZING)
            data = archive.finalize()
            result = ExtractionResult(
                archive=data,
                filename=archive_filename(filename),
                entries=archive.names,
                pages=pages,
                mode=mode,
                used_disk=decision.use_disk,
                image_format=image_format,
            )
            self._transition(ExtractionState.DONE)
            LOGGER.info(
                "Finished image extraction for %s: %d image(s), %d duplicate(s), %d skipped, %d failed page(s)",
                filename or "<unnamed>",
                result.extracted,
                result.duplicates,
                result.skipped,
                len(result.failed_pages),
            )
            return result
        except ImageExtractorException as exc:
            self._transition(ExtractionState.FAILED)
            LOGGER.error("Image extraction failed: %s", exc)
            raise
        except Exception as exc:
            self._transition(ExtractionState.FAILED)
            LOGGER.exception("Image extraction failed")
            raise ImageExtractorException(f"Image extraction failed: {exc}") from exc
        finally:
            if archive is not None:
                archive.abandon()
            if archive_stream is not None:
                archive_stream.close()
            if document is not None:
                document.close()
            if storage is not None:
                storage.cleanup()


def extract_images(
    source: Union[bytes, bytearray, BinaryIO, str, Path],
    filename: Optional[str] = None,
    *,
    image_format: Union[ImageFormat, str] = ImageFormat.PNG,
    deduplicate: bool = True,
    **options: Any,
) -> ExtractionResult:
    """Convenience wrapper around :class:`ImageExtractor`.

    Extra keyword arguments are passed to :class:`ExtractionOptions`.
    """

    extractor = ImageExtractor(
        ExtractionOptions(image_format=image_format, deduplicate=deduplicate, **options)
    )
    if isinstance(source, (str, Path)):
        return extractor.extract_file(source)
    return extractor.extract(source, filename=filename)


__all__ = [
    "ExtractionState",
    "ImageExtractor",
    "ProgressCallback",
    "extract_images",
    "select_mode",
]
