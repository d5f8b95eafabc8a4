"""pypdf backend implementation for PDF Image Extractor."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import BinaryIO, List, Optional, Union

from PIL import Image
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..exceptions import EncryptedPDFError, InvalidPDFError
from .base import BackendDocument, ImageKey, PDFBackend, describe_key


@dataclass
class PypdfDocument(BackendDocument):
    reader: PdfReader
    handle: Optional[BinaryIO] = None
    # PdfReader resolves objects by seeking one shared stream.
    _lock: Lock = field(default_factory=Lock, repr=False)
    _closed: bool = field(default=False, repr=False)

    def image_keys(self, page_index: int) -> List[ImageKey]:
        with self._lock:
            page = self.reader.pages[page_index]
            return list(page.images.keys())

    def decode_image(self, page_index: int, key: ImageKey) -> Image.Image:
        with self._lock:
            page = self.reader.pages[page_index]
            image = page.images[key].image
        if image is None:
            raise ValueError(f"No pixel data for image '{describe_key(key)}'")
        image.load()
        return image

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self.handle is not None:
                self.handle.close()


class PypdfBackend(PDFBackend):
    """Backend implementation that uses `pypdf` under the hood."""

    def load(
        self,
        source: Union[bytes, str, Path],
        password: Optional[str] = None,
    ) -> PypdfDocument:
        handle: BinaryIO
        if isinstance(source, (bytes, bytearray)):
            handle = io.BytesIO(source)
            file_size = len(source)
            label = "<memory>"
        else:
            path = Path(source)
            if not path.exists() or not path.is_file():
                raise InvalidPDFError(f"PDF file not found: {source}")
            try:
                handle = path.open("rb")
                file_size = path.stat().st_size
            except OSError as exc:
                raise InvalidPDFError(f"Unable to read PDF file: {source}. Error: {exc}") from exc
            label = str(path)

        try:
            reader = PdfReader(handle)
            self._unlock(reader, password)
            num_pages = len(reader.pages)
        except (InvalidPDFError, EncryptedPDFError):
            handle.close()
            raise
        except PdfReadError as exc:
            handle.close()
            raise InvalidPDFError(f"Corrupted or invalid PDF file: {label}. Error: {exc}") from exc
        except Exception as exc:
            handle.close()
            raise InvalidPDFError(f"Unexpected error reading PDF: {label}. Error: {exc}") from exc

        return PypdfDocument(num_pages=num_pages, file_size=file_size, reader=reader, handle=handle)

    @staticmethod
    def _unlock(reader: PdfReader, password: Optional[str]) -> None:
        if not reader.is_encrypted:
            return
        if password is None:
            # Owner-password-only files open with an empty user password.
            password = ""
        try:
            unlocked = reader.decrypt(password)
        except Exception as exc:
            raise EncryptedPDFError(f"Unable to decrypt PDF: {exc}") from exc
        if unlocked == 0:
            if password:
                raise EncryptedPDFError("Failed to decrypt PDF with supplied password.")
            raise EncryptedPDFError("PDF is encrypted. Supply a password to process this file.")
