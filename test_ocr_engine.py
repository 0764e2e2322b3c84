"""Tests for the OCR engine handle and reader."""

import threading
import time

from PIL import Image

from ocr_engine import OcrEngineHandle, OcrReader
from settings import ExtractionSettings


class FakeEngine:
    supports_concurrent_recognition = False

    def __init__(self, text="Recognized Text", error=None):
        self.text = text
        self.error = error
        self.images = []

    def recognize(self, image):
        self.images.append(image)
        if self.error:
            raise self.error
        return self.text


def _image(tmp_path):
    path = tmp_path / "page.png"
    Image.new("RGB", (20, 20), "white").save(path)
    return path


def _reader(engine):
    settings = ExtractionSettings()
    return OcrReader(handle=OcrEngineHandle(factory=lambda: engine, settings=settings), settings=settings)


def test_engine_is_built_lazily_and_once():
    built = []
    handle = OcrEngineHandle(factory=lambda: built.append(1) or FakeEngine(), settings=ExtractionSettings())
    assert not handle.initialized
    first = handle.get()
    assert handle.get() is first
    assert handle.initialized
    assert len(built) == 1


def test_concurrent_first_use_constructs_one_engine():
    built = []

    def slow_factory():
        time.sleep(0.05)
        built.append(1)
        return FakeEngine()

    handle = OcrEngineHandle(factory=slow_factory, settings=ExtractionSettings())
    engines = []
    threads = [threading.Thread(target=lambda: engines.append(handle.get())) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(built) == 1
    assert len(engines) == 8
    assert all(engine is engines[0] for engine in engines)


def test_recognize_reports_progress_milestones(tmp_path):
    engine = FakeEngine("PO #12345")
    progress = []
    text = _reader(engine).recognize(_image(tmp_path), progress_callback=progress.append)
    assert text == "PO #12345"
    assert progress == [25, 50, 75]
    assert engine.images[0].mode == "L"


def test_all_milestones_are_reported_before_recognition_runs(tmp_path):
    progress = []

    class RecordingEngine(FakeEngine):
        def recognize(self, image):
            self.seen = list(progress)
            return super().recognize(image)

    engine = RecordingEngine("ok")
    _reader(engine).recognize(_image(tmp_path), progress_callback=progress.append)
    assert engine.seen == [25, 50, 75]


def test_progress_callback_errors_do_not_interrupt_recognition(tmp_path):
    def broken_callback(percent):
        raise RuntimeError("listener gone")

    assert _reader(FakeEngine("ok")).recognize(_image(tmp_path), broken_callback) == "ok"


def test_engine_failure_returns_empty_string(tmp_path):
    engine = FakeEngine(error=RuntimeError("engine crashed"))
    assert _reader(engine).recognize(_image(tmp_path)) == ""


def test_engine_construction_failure_returns_empty_string(tmp_path):
    def failing_factory():
        raise OSError("tesseract not installed")

    settings = ExtractionSettings()
    reader = OcrReader(handle=OcrEngineHandle(factory=failing_factory, settings=settings), settings=settings)
    assert reader.recognize(_image(tmp_path)) == ""


def test_unreadable_image_returns_empty_string(tmp_path):
    bogus = tmp_path / "not-an-image.png"
    bogus.write_bytes(b"garbage")
    assert _reader(FakeEngine()).recognize(bogus) == ""
