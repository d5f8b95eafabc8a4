"""Backend abstractions for PDF Image Extractor."""

from .base import BackendDocument, ImageKey, PDFBackend
from .pypdf_backend import PypdfBackend, PypdfDocument

__all__ = [
    "BackendDocument",
    "ImageKey",
    "PDFBackend",
    "PypdfBackend",
    "PypdfDocument",
]
