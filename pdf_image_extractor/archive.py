"""Single-writer ZIP archive sink shared by page tasks."""

from __future__ import annotations

import io
import zipfile
from threading import Lock
from typing import BinaryIO, List, Optional

from .exceptions import ArchiveError, DuplicateEntryError
from .utils import get_logger

LOGGER = get_logger("pdf_image_extractor.archive")


def entry_name(basename: str, page_number: int, ordinal: int, extension: str) -> str:
    """Return the archive entry name for the ``ordinal``-th image kept on a page."""

    return f"{basename}_page{page_number}_image{ordinal}.{extension}"


class ArchiveWriter:
    """Append-only ZIP archive over one binary stream.

    ``append`` is a critical section: one entry is fully written and closed
    before the next one starts. The lock is private to the writer.
    """

    def __init__(self, stream: Optional[BinaryIO] = None, *, compresslevel: int = 9) -> None:
        self._stream: BinaryIO = stream if stream is not None else io.BytesIO()
        try:
            self._zip = zipfile.ZipFile(
                self._stream,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=compresslevel,
            )
        except (OSError, ValueError) as exc:
            raise ArchiveError(f"Unable to open archive stream: {exc}") from exc
        self._lock = Lock()
        self._names: List[str] = []
        self._closed = False

    @property
    def names(self) -> List[str]:
        with self._lock:
            return list(self._names)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def append(self, name: str, data: bytes) -> None:
        """Write one complete entry.

        Raises:
            DuplicateEntryError: If ``name`` was already written
            ArchiveError: If the archive is closed or the write fails; the
                failed entry leaves no trace in the archive
        """
        with self._lock:
            if self._closed:
                raise ArchiveError(f"Cannot add '{name}': archive is already closed.")
            if name in self._zip.NameToInfo:
                raise DuplicateEntryError(f"Archive entry '{name}' already exists.")

            start = self._zip.start_dir
            try:
                self._zip.writestr(name, data)
            except Exception as exc:
                self._rollback(name, start)
                raise ArchiveError(f"Failed to write archive entry '{name}': {exc}") from exc
            self._names.append(name)

    def _rollback(self, name: str, start: int) -> None:
        self._zip.filelist = [info for info in self._zip.filelist if info.filename != name]
        self._zip.NameToInfo.pop(name, None)
        self._zip.start_dir = start
        try:
            self._stream.seek(start)
            self._stream.truncate()
        except OSError as exc:
            # The central directory is rewritten from start_dir on close, so a
            # stale tail is still unreachable.
            LOGGER.warning("Could not truncate archive after failed entry '%s': %s", name, exc)

    def finalize(self) -> bytes:
        """Write the central directory and return the finished archive bytes."""

        with self._lock:
            if self._closed:
                raise ArchiveError("Archive is already closed.")
            self._closed = True
            try:
                self._zip.close()
                if isinstance(self._stream, io.BytesIO):
                    return self._stream.getvalue()
                self._stream.flush()
                self._stream.seek(0)
                return self._stream.read()
            except (OSError, ValueError) as exc:
                raise ArchiveError(f"Failed to finalize archive: {exc}") from exc

    def abandon(self) -> None:
        """Close the archive without producing output. Safe to call repeatedly."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._zip.close()
            except (OSError, ValueError) as exc:
                LOGGER.debug("Ignoring error while abandoning archive: %s", exc)


__all__ = ["ArchiveWriter", "entry_name"]
