from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Sequence, Tuple, Union
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject, NumberObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

RED = (220, 30, 30)
GREEN = (30, 200, 60)
BLUE = (40, 60, 210)
YELLOW = (240, 220, 20)
CORRUPT = "corrupt"

ImageFill = Union[Tuple[int, int, int], str]
PageFills = Sequence[ImageFill]


def _image_xobject(writer: PdfWriter, fill: ImageFill, size: int = 8):
    stream = DecodedStreamObject()
    if fill == CORRUPT:
        stream.set_data(b"this is not a jpeg stream")
        stream[NameObject("/Filter")] = NameObject("/DCTDecode")
    else:
        stream.set_data(bytes(fill) * (size * size))
    stream.update(
        {
            NameObject("/Type"): NameObject("/XObject"),
            NameObject("/Subtype"): NameObject("/Image"),
            NameObject("/Width"): NumberObject(size),
            NameObject("/Height"): NumberObject(size),
            NameObject("/ColorSpace"): NameObject("/DeviceRGB"),
            NameObject("/BitsPerComponent"): NumberObject(8),
        }
    )
    return writer._add_object(stream)


def build_pdf(pages: Sequence[PageFills], password: str | None = None) -> bytes:
    """Build a PDF whose pages carry the given image XObjects, in order."""

    writer = PdfWriter()
    for images in pages:
        page = writer.add_blank_page(width=200, height=200)
        if not images:
            continue
        xobjects = DictionaryObject()
        for index, fill in enumerate(images):
            xobjects[NameObject(f"/Im{index}")] = _image_xobject(writer, fill)
        page[NameObject("/Resources")] = DictionaryObject({NameObject("/XObject"): xobjects})
    if password is not None:
        writer.encrypt(user_password=password, owner_password=password)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def pdf_factory() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture()
def pdf_file_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, pages: Sequence[PageFills], password: str | None = None) -> Path:
        path = tmp_path / filename
        path.write_bytes(build_pdf(pages, password=password))
        return path

    return _create


@pytest.fixture()
def three_page_pdf() -> bytes:
    """Page 1 holds images A and B, page 2 none, page 3 repeats A."""

    return build_pdf([[RED, GREEN], [], [RED]])


@pytest.fixture()
def isolated_tempdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point :mod:`tempfile` at an empty directory so leftovers can be detected."""

    import tempfile

    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch
