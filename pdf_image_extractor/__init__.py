"""
PDF Image Extractor - Pull every embedded image out of a PDF into one ZIP.

Pages are scanned sequentially or on a bounded thread pool, images are
re-encoded in a single target format, identical images are stored once, and
all entries land in one archive whose names are stable across runs.

Quick Start:
    >>> from pdf_image_extractor import ImageExtractor, ExtractionOptions
    >>> extractor = ImageExtractor(ExtractionOptions(image_format='png'))
    >>> result = extractor.extract_file('report.pdf')
    >>> result.write_to(result.filename)

Main Classes:
    - ImageExtractor: Runs one extraction call per document
    - ArchiveWriter: Thread-safe single-writer ZIP sink
    - DedupRegistry: Thread-safe content fingerprint set

Data Classes:
    - ExtractionOptions: Options for an extraction call
    - ExtractionResult: Archive bytes plus per-page outcomes
    - PageResult / ImageOutcome: What happened to each page and image

Exceptions:
    - ImageExtractorException: Base exception
    - InvalidPDFError: Invalid or corrupted PDF
    - EncryptedPDFError: Encrypted PDF that could not be unlocked
    - StorageError: Temporary storage could not be used
    - ArchiveError: The archive could not be written
    - UnsupportedFormatError: Unknown target image format
    - ExtractionInterruptedError: Timed out or interrupted

For CLI usage, use the 'pdf-image-extractor' command after installation.
"""

# Core classes
from pdf_image_extractor.extractor import ImageExtractor, ExtractionState, extract_images
from pdf_image_extractor.archive import ArchiveWriter
from pdf_image_extractor.registry import DedupRegistry, NullRegistry
from pdf_image_extractor.storage import StoragePolicy

# Data types
from pdf_image_extractor.codec import ImageFormat, supported_formats
from pdf_image_extractor.types import (
    ExecutionMode,
    ExtractionOptions,
    ExtractionResult,
    ImageOutcome,
    ImageStatus,
    PageResult,
)

# Exceptions
from pdf_image_extractor.exceptions import (
    ImageExtractorException,
    InvalidPDFError,
    EncryptedPDFError,
    StorageError,
    ArchiveError,
    DuplicateEntryError,
    UnsupportedFormatError,
    PageEnumerationError,
    ExtractionInterruptedError,
)

# Utility functions
from pdf_image_extractor.utils import archive_filename, format_file_size

__version__ = "1.0.0"
__author__ = "PDF Image Extractor Contributors"
__license__ = "MIT"

__all__ = [
    # Main classes
    "ImageExtractor",
    "ExtractionState",
    "ArchiveWriter",
    "DedupRegistry",
    "NullRegistry",
    "StoragePolicy",
    "extract_images",
    # Data types
    "ImageFormat",
    "ExecutionMode",
    "ExtractionOptions",
    "ExtractionResult",
    "ImageOutcome",
    "ImageStatus",
    "PageResult",
    # Exceptions
    "ImageExtractorException",
    "InvalidPDFError",
    "EncryptedPDFError",
    "StorageError",
    "ArchiveError",
    "DuplicateEntryError",
    "UnsupportedFormatError",
    "PageEnumerationError",
    "ExtractionInterruptedError",
    # Utility functions
    "archive_filename",
    "format_file_size",
    "supported_formats",
    # Version info
    "__version__",
]
