from __future__ import annotations

import io

import pytest
from PIL import Image

from pdf_image_extractor.codec import ImageFormat, encode_image, prepare_image, supported_formats
from pdf_image_extractor.exceptions import UnsupportedFormatError


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("png", ImageFormat.PNG),
        ("PNG", ImageFormat.PNG),
        ("jpg", ImageFormat.JPEG),
        (".jpeg", ImageFormat.JPEG),
        ("tif", ImageFormat.TIFF),
        (ImageFormat.WEBP, ImageFormat.WEBP),
    ],
)
def test_parse_formats(value, expected: ImageFormat) -> None:
    assert ImageFormat.parse(value) is expected


def test_parse_unknown_format() -> None:
    with pytest.raises(UnsupportedFormatError, match="svg"):
        ImageFormat.parse("svg")


def test_supported_formats_lists_every_member() -> None:
    assert supported_formats() == ["png", "jpeg", "gif", "bmp", "tiff", "webp"]


def test_rgba_is_flattened_for_jpeg() -> None:
    image = Image.new("RGBA", (4, 4), (10, 20, 30, 128))

    data = encode_image(image, ImageFormat.JPEG)

    decoded = Image.open(io.BytesIO(data))
    assert decoded.format == "JPEG"
    assert decoded.mode == "RGB"


def test_png_keeps_native_modes() -> None:
    gray = Image.new("L", (4, 4), 128)

    assert prepare_image(gray, ImageFormat.PNG) is gray
    assert Image.open(io.BytesIO(encode_image(gray, ImageFormat.PNG))).mode == "L"


def test_cmyk_is_converted_for_png() -> None:
    image = Image.new("CMYK", (4, 4), (0, 50, 100, 0))

    assert prepare_image(image, ImageFormat.PNG).mode == "RGB"


def test_webp_needs_rgb() -> None:
    image = Image.new("L", (4, 4), 40)

    assert prepare_image(image, ImageFormat.WEBP).mode == "RGB"


def test_canonicalize_unifies_color_models() -> None:
    gray = Image.new("L", (4, 4), 90)
    rgb = gray.convert("RGB")

    plain = encode_image(gray, ImageFormat.PNG)
    canonical = encode_image(gray, ImageFormat.PNG, canonicalize=True)

    assert plain != encode_image(rgb, ImageFormat.PNG)
    assert canonical == encode_image(rgb, ImageFormat.PNG, canonicalize=True)


def test_canonicalize_keeps_alpha_when_supported() -> None:
    image = Image.new("LA", (4, 4), (90, 100))

    assert prepare_image(image, ImageFormat.PNG, canonicalize=True).mode == "RGBA"
    assert prepare_image(image, ImageFormat.BMP, canonicalize=True).mode == "RGB"


@pytest.mark.parametrize("fmt", list(ImageFormat))
def test_every_format_encodes_rgb(fmt: ImageFormat) -> None:
    image = Image.new("RGB", (8, 8), (200, 10, 10))

    data = encode_image(image, fmt)

    assert Image.open(io.BytesIO(data)).format == fmt.pillow_format
