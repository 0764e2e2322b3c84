"""Tests for first-page rasterization and its tool fallback chain."""

import subprocess
from pathlib import Path

import pytest

import pdf_rasterizer
from pdf_rasterizer import (
    MagickRasterizer,
    PopplerRasterizer,
    build_rasterizers,
    rasterize_first_page,
    rasterized_first_page,
)
from settings import ExtractionSettings


class FailingRasterizer:
    """Writes a partial file, then fails."""

    name = "failing"

    def __init__(self):
        self.output_paths = []

    def rasterize(self, pdf_path, output_path):
        self.output_paths.append(output_path)
        output_path.write_bytes(b"partial")
        raise RuntimeError("tool crashed")


class WritingRasterizer:
    name = "writing"

    def __init__(self):
        self.calls = 0

    def rasterize(self, pdf_path, output_path):
        self.calls += 1
        output_path.write_bytes(b"png")


class SilentRasterizer:
    """Exits cleanly without producing a file."""

    name = "silent"

    def rasterize(self, pdf_path, output_path):
        return None


def test_magick_command_line():
    rasterizer = MagickRasterizer(["gm", "convert"], "graphicsmagick", ExtractionSettings())
    command = rasterizer.build_command(Path("/tmp/order.pdf"), Path("/tmp/out.png"))
    assert command == [
        "gm", "convert", "-density", "200", "/tmp/order.pdf[0]",
        "-resize", "1700x2200", "/tmp/out.png",
    ]


def test_falls_back_to_next_rasterizer_and_cleans_partial_output():
    failing, writing = FailingRasterizer(), WritingRasterizer()
    image_path = rasterize_first_page("order.pdf", rasterizers=[failing, writing])
    try:
        assert image_path is not None and image_path.exists()
        assert writing.calls == 1
    finally:
        image_path.unlink()


def test_returns_none_when_every_rasterizer_fails():
    failing = FailingRasterizer()
    assert rasterize_first_page("order.pdf", rasterizers=[failing, SilentRasterizer()]) is None
    assert not failing.output_paths[0].exists()


def test_first_successful_rasterizer_short_circuits():
    first, second = WritingRasterizer(), WritingRasterizer()
    with rasterized_first_page("order.pdf", rasterizers=[first, second]) as image_path:
        assert image_path.exists()
    assert (first.calls, second.calls) == (1, 0)


def test_non_path_input_raises_type_error():
    with pytest.raises(TypeError):
        rasterize_first_page(12345, rasterizers=[])


def test_context_manager_deletes_image_when_body_raises():
    captured = {}
    with pytest.raises(ValueError):
        with rasterized_first_page("order.pdf", rasterizers=[WritingRasterizer()]) as image_path:
            captured["path"] = image_path
            raise ValueError("recognition blew up")
    assert not captured["path"].exists()


def test_poppler_rasterizer_passes_resolution_and_timeout(monkeypatch, tmp_path):
    calls = {}

    def fake_convert(pdf_path, **kwargs):
        calls["pdf_path"] = pdf_path
        calls.update(kwargs)
        return [str(tmp_path / "out.png")]

    monkeypatch.setattr(pdf_rasterizer, "convert_from_path", fake_convert)
    settings = ExtractionSettings(raster_timeout_seconds=12)
    PopplerRasterizer(settings).rasterize(Path("in.pdf"), tmp_path / "out.png")

    assert calls["pdf_path"] == "in.pdf"
    assert calls["dpi"] == 200
    assert (calls["first_page"], calls["last_page"]) == (1, 1)
    assert calls["size"] == (1700, 2200)
    assert calls["output_folder"] == str(tmp_path)
    assert calls["output_file"] == "out"
    assert calls["single_file"] is True
    assert calls["timeout"] == 12


def test_magick_rasterizer_runs_with_timeout(monkeypatch):
    calls = {}

    def fake_run(cmd, **kwargs):
        calls["cmd"] = cmd
        calls.update(kwargs)

    monkeypatch.setattr(pdf_rasterizer.subprocess, "run", fake_run)
    MagickRasterizer(["convert"], "imagemagick", ExtractionSettings()).rasterize(
        Path("in.pdf"), Path("out.png")
    )
    assert calls["cmd"][0] == "convert"
    assert calls["timeout"] == 30.0
    assert calls["check"] is True


def test_hung_tool_times_out_and_chain_continues(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(pdf_rasterizer.subprocess, "run", fake_run)
    hung = MagickRasterizer(["gm", "convert"], "graphicsmagick", ExtractionSettings())
    writing = WritingRasterizer()
    with rasterized_first_page("order.pdf", rasterizers=[hung, writing]) as image_path:
        assert image_path is not None
    assert writing.calls == 1


def test_missing_tool_is_not_fatal(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(pdf_rasterizer.subprocess, "run", fake_run)
    rasterizers = [MagickRasterizer(["convert"], "imagemagick", ExtractionSettings())]
    assert rasterize_first_page("order.pdf", rasterizers=rasterizers) is None


def test_build_rasterizers_skips_unknown_names():
    settings = ExtractionSettings(rasterizers=["pdftoppm", "bogus", "imagemagick"])
    assert [r.name for r in build_rasterizers(settings)] == ["pdftoppm", "imagemagick"]
