"""Backend protocol for reading page images out of a PDF."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Protocol, Union

from PIL import Image

# Backend-specific handle identifying one image resource of a page.
ImageKey = Any


@dataclass
class BackendDocument:
    """Represents an opened PDF document with backend-specific helpers."""

    num_pages: int
    file_size: int

    def image_keys(self, page_index: int) -> List[ImageKey]:
        """Keys of the page's image resources in resource dictionary order."""
        raise NotImplementedError

    def decode_image(self, page_index: int, key: ImageKey) -> Image.Image:
        """Decode one image resource into pixels."""
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class PDFBackend(Protocol):
    """Protocol defining the document-model operations the extractor consumes."""

    def load(
        self,
        source: Union[bytes, str, Path],
        password: str | None = None,
    ) -> BackendDocument:
        """Open a PDF from raw bytes or a file path."""


def describe_key(key: ImageKey) -> str:
    """Readable form of an image key for logs and skip reasons."""

    if isinstance(key, (list, tuple)):
        return "/".join(str(part).lstrip("/") for part in key)
    return str(key).lstrip("/")
