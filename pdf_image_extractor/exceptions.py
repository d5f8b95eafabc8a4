"""
Custom exceptions for PDF Image Extractor.

Fatal conditions are raised as exceptions. Per-image and per-page problems are
never raised to the caller; they are reported through
:class:`~pdf_image_extractor.types.ImageOutcome` and
:class:`~pdf_image_extractor.types.PageResult` instead.
"""


class ImageExtractorException(Exception):
    """Base exception for all PDF Image Extractor errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown image extraction error occurred."


class InvalidPDFError(ImageExtractorException):
    """Raised when the PDF payload cannot be opened or parsed."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF file."


class EncryptedPDFError(ImageExtractorException):
    """Raised when PDF is encrypted and cannot be processed."""

    @property
    def default_message(self) -> str:
        return "PDF is encrypted and cannot be processed without a password."


class StorageError(ImageExtractorException):
    """Raised when temporary storage cannot be created or written."""

    @property
    def default_message(self) -> str:
        return "Unable to create temporary storage for extraction."


class ArchiveError(ImageExtractorException):
    """Raised when the output archive cannot be opened, written or finalized."""

    @property
    def default_message(self) -> str:
        return "Unable to write the output archive."


class DuplicateEntryError(ArchiveError):
    """Raised when two archive entries would share a name."""

    @property
    def default_message(self) -> str:
        return "Archive entry name is already in use."


class UnsupportedFormatError(ImageExtractorException):
    """Raised when the requested target image format is not supported."""

    @property
    def default_message(self) -> str:
        return "Unsupported target image format."


class PageEnumerationError(ImageExtractorException):
    """Raised when a page's image resources cannot be listed."""

    @property
    def default_message(self) -> str:
        return "Unable to enumerate page image resources."


class ExtractionInterruptedError(ImageExtractorException):
    """Raised when an extraction is timed out, cancelled or interrupted."""

    @property
    def default_message(self) -> str:
        return "Image extraction was interrupted before completion."
