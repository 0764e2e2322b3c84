"""Tests for digital (embedded text layer) extraction."""

import pytest

import pdf_text_extractor
from pdf_text_extractor import DigitalTextError, DigitalTextExtractor


class FakePage:
    def __init__(self, text):
        self.text = text

    def extract_text(self):
        return self.text


class FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_pdfplumber_pages_are_joined(monkeypatch):
    monkeypatch.setattr(
        pdf_text_extractor.pdfplumber, "open",
        lambda path: FakePdf([FakePage("Page one"), FakePage(None), FakePage("Page three")]),
    )
    assert DigitalTextExtractor().extract("order.pdf") == "Page one\n\nPage three"


def test_falls_back_to_next_backend():
    extractor = DigitalTextExtractor()

    def broken(path):
        raise ValueError("bad xref table")

    extractor.backends = [("broken", broken), ("working", lambda path: "purchase order")]
    assert extractor.extract("order.pdf") == "purchase order"


def test_empty_text_layer_is_not_an_error():
    extractor = DigitalTextExtractor()
    extractor.backends = [("empty", lambda path: "")]
    assert extractor.extract("scan.pdf") == ""


def test_all_backends_failing_raises():
    extractor = DigitalTextExtractor()

    def broken(path):
        raise OSError("file not found")

    extractor.backends = [("a", broken), ("b", broken)]
    with pytest.raises(DigitalTextError):
        extractor.extract("missing.pdf")


def test_real_backends_fail_on_missing_file(tmp_path):
    with pytest.raises(DigitalTextError):
        DigitalTextExtractor().extract(tmp_path / "missing.pdf")
