"""Re-encoding of decoded images through Pillow."""

from __future__ import annotations

import io
from enum import Enum
from typing import Union

from PIL import Image

from .exceptions import UnsupportedFormatError


class ImageFormat(str, Enum):
    """Target raster formats for extracted images."""

    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    WEBP = "webp"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def pillow_format(self) -> str:
        return self.value.upper()

    @property
    def supports_alpha(self) -> bool:
        return self in (ImageFormat.PNG, ImageFormat.TIFF, ImageFormat.WEBP)

    @classmethod
    def parse(cls, value: Union[str, "ImageFormat"]) -> "ImageFormat":
        """Return the format named by *value* (case-insensitive, ``jpg``/``tif`` aliases)."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().lstrip(".")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            raise UnsupportedFormatError(
                f"Unsupported image format: '{value}'. Supported formats: {supported}."
            ) from exc


_ALIASES = {"jpg": "jpeg", "tif": "tiff"}

# Modes each encoder accepts without conversion.
_NATIVE_MODES: dict[ImageFormat, frozenset[str]] = {
    ImageFormat.PNG: frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}),
    ImageFormat.JPEG: frozenset({"L", "RGB", "CMYK"}),
    ImageFormat.GIF: frozenset({"1", "L", "P", "RGB", "RGBA"}),
    ImageFormat.BMP: frozenset({"1", "L", "P", "RGB", "RGBA"}),
    ImageFormat.TIFF: frozenset({"1", "L", "LA", "P", "RGB", "RGBA", "CMYK", "I;16"}),
    ImageFormat.WEBP: frozenset({"RGB", "RGBA"}),
}


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )


def prepare_image(
    image: Image.Image,
    image_format: ImageFormat,
    *,
    canonicalize: bool = False,
) -> Image.Image:
    """Convert *image* to a mode the target encoder accepts.

    With ``canonicalize`` every image is brought to RGB (or RGBA when it
    carries transparency and the format can store it), so duplicates stored
    under different color models end up with identical encoded bytes.
    """

    keep_alpha = _has_alpha(image) and image_format.supports_alpha
    if canonicalize:
        target = "RGBA" if keep_alpha else "RGB"
        return image if image.mode == target else image.convert(target)

    if image.mode in _NATIVE_MODES[image_format]:
        return image
    if image.mode == "1" or (image.mode in ("L", "LA", "I", "I;16", "F") and not keep_alpha):
        # Grayscale sources keep a grayscale model where the encoder allows it.
        if "L" in _NATIVE_MODES[image_format]:
            return image.convert("L")
    return image.convert("RGBA" if keep_alpha else "RGB")


def encode_image(
    image: Image.Image,
    image_format: ImageFormat,
    *,
    canonicalize: bool = False,
) -> bytes:
    """Encode *image* as *image_format* and return the encoded bytes."""

    prepared = prepare_image(image, image_format, canonicalize=canonicalize)
    buffer = io.BytesIO()
    prepared.save(buffer, format=image_format.pillow_format)
    return buffer.getvalue()


def supported_formats() -> list[str]:
    return [member.value for member in ImageFormat]


__all__ = ["ImageFormat", "encode_image", "prepare_image", "supported_formats"]
