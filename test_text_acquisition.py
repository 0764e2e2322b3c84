"""Tests for hybrid digital/OCR text acquisition."""

import pytest

from settings import ExtractionSettings
from text_acquisition import HybridTextAcquirer


class FakeDigital:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error

    def extract(self, path):
        if self.error:
            raise self.error
        return self.text


class FakeReader:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.images = []

    def recognize(self, image_path, progress_callback=None):
        self.images.append(image_path)
        if self.error:
            raise self.error
        return self.text


class WritingRasterizer:
    name = "writing"

    def __init__(self, fail=False):
        self.fail = fail
        self.output_paths = []

    def rasterize(self, pdf_path, output_path):
        self.output_paths.append(output_path)
        if self.fail:
            raise RuntimeError("no rasterizer available")
        output_path.write_bytes(b"png")


def _acquirer(digital, reader, rasterizer=None):
    return HybridTextAcquirer(
        digital_extractor=digital,
        ocr_reader=reader,
        rasterizers=[rasterizer or WritingRasterizer()],
        settings=ExtractionSettings(),
    )


def test_long_digital_text_skips_ocr():
    reader = FakeReader("X" * 500)
    text = _acquirer(FakeDigital("A" * 50), reader).acquire_text("order.pdf")
    assert text == "a" * 50
    assert reader.images == []


def test_short_digital_text_uses_longer_ocr_text():
    reader = FakeReader("PURCHASE ORDER PO #12345")
    text = _acquirer(FakeDigital("stamp"), reader).acquire_text("scan.pdf")
    assert text == "purchase order po #12345"
    assert len(reader.images) == 1


def test_tie_keeps_digital_text():
    text = _acquirer(FakeDigital("ABCDE"), FakeReader("VWXYZ")).acquire_text("scan.pdf")
    assert text == "abcde"


def test_shorter_ocr_text_keeps_digital_text():
    text = _acquirer(FakeDigital("digital words"), FakeReader("ocr")).acquire_text("scan.pdf")
    assert text == "digital words"


def test_digital_failure_counts_as_empty_yield():
    reader = FakeReader("OCR RECOVERED TEXT")
    text = _acquirer(FakeDigital(error=ValueError("corrupt pdf")), reader).acquire_text("bad.pdf")
    assert text == "ocr recovered text"


def test_total_failure_yields_empty_string():
    acquirer = _acquirer(
        FakeDigital(error=ValueError("corrupt pdf")),
        FakeReader("never used"),
        WritingRasterizer(fail=True),
    )
    assert acquirer.acquire_text("bad.pdf") == ""


def test_temporary_image_is_removed_after_success():
    rasterizer = WritingRasterizer()
    _acquirer(FakeDigital(""), FakeReader("some ocr text"), rasterizer).acquire_text("scan.pdf")
    assert rasterizer.output_paths
    assert not rasterizer.output_paths[0].exists()


def test_temporary_image_is_removed_when_recognition_raises():
    rasterizer = WritingRasterizer()
    acquirer = _acquirer(FakeDigital("tiny"), FakeReader(error=RuntimeError("engine died")), rasterizer)
    assert acquirer.acquire_text("scan.pdf") == "tiny"
    assert not rasterizer.output_paths[0].exists()


def test_non_path_input_raises_type_error():
    with pytest.raises(TypeError):
        _acquirer(FakeDigital(""), FakeReader("")).acquire_text(None)
