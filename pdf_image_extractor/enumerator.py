"""Lazy enumeration of a page's embedded images."""

from __future__ import annotations

from typing import Iterator, Union

from .backends.base import BackendDocument, describe_key
from .codec import ImageFormat, encode_image
from .exceptions import PageEnumerationError
from .types import EmbeddedImage, ImageOutcome, ImageStatus
from .utils import get_logger

LOGGER = get_logger("pdf_image_extractor.enumerator")

PageItem = Union[EmbeddedImage, ImageOutcome]


def iter_page_images(
    document: BackendDocument,
    page_index: int,
    image_format: ImageFormat,
    *,
    canonicalize: bool = False,
) -> Iterator[PageItem]:
    """Yield the page's images re-encoded as *image_format*, in source order.

    Images that fail to decode or encode are yielded as ``SKIPPED``
    :class:`ImageOutcome` records and enumeration carries on.

    Raises:
        PageEnumerationError: If the page's image resources cannot be listed
    """
    page_number = page_index + 1
    try:
        keys = document.image_keys(page_index)
    except Exception as exc:
        raise PageEnumerationError(
            f"Unable to list images on page {page_number}: {exc}"
        ) from exc

    for source_index, key in enumerate(keys):
        label = describe_key(key)
        try:
            image = document.decode_image(page_index, key)
        except Exception as exc:
            LOGGER.warning("Skipping image %s on page %d: decode failed: %s", label, page_number, exc)
            yield ImageOutcome(
                page_number=page_number,
                source_index=source_index,
                status=ImageStatus.SKIPPED,
                reason=f"decode failed: {exc}",
            )
            continue

        try:
            data = encode_image(image, image_format, canonicalize=canonicalize)
        except Exception as exc:
            LOGGER.warning(
                "Skipping image %s on page %d: %s encoding failed: %s",
                label,
                page_number,
                image_format.value,
                exc,
            )
            yield ImageOutcome(
                page_number=page_number,
                source_index=source_index,
                status=ImageStatus.SKIPPED,
                reason=f"encode failed: {exc}",
            )
            continue

        yield EmbeddedImage(
            page_number=page_number,
            source_index=source_index,
            key=label,
            data=data,
            width=image.width,
            height=image.height,
            mode=image.mode,
        )


__all__ = ["PageItem", "iter_page_images"]
