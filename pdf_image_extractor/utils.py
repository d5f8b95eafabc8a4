"""Utilities shared by PDF Image Extractor modules."""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

PACKAGE_LOGGER = "pdf_image_extractor"

_EXTENSION_RE = re.compile(r"[.][^.]+$")


def get_logger(name: str) -> logging.Logger:
    """Return *name*'s logger, attaching the package stream handler once."""

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        package_logger.propagate = False
    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    get_logger(PACKAGE_LOGGER).setLevel(level)


def simple_filename(filename: Optional[str]) -> str:
    """Strip any directory components from a client-supplied filename."""

    if not filename:
        return ""
    return re.split(r"[\\/]", filename.strip())[-1]


def simple_basename(filename: Optional[str], default: str = "document") -> str:
    """Return the simple filename with its last extension removed.

    >>> simple_basename("reports/doc.final.pdf")
    'doc.final'
    """

    base = _EXTENSION_RE.sub("", simple_filename(filename))
    return base or default


def archive_filename(filename: Optional[str], default: str = "document.pdf") -> str:
    """Suggested name for the archive produced from *filename*."""

    return f"{simple_filename(filename) or default}_extracted-images.zip"


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500 KB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


__all__ = [
    "PACKAGE_LOGGER",
    "archive_filename",
    "format_file_size",
    "get_logger",
    "set_log_level",
    "simple_basename",
    "simple_filename",
]
