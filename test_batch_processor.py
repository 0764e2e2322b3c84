"""Tests for batch processing of work-order PDFs."""

import json

import pytest

from batch_processor import BatchProcessor
from settings import ExtractionSettings
from work_order_pipeline import WorkOrderPipeline

DOCUMENTS = {
    "clear_vision.pdf": (
        "Clear Vision Facility Management\n"
        "Work Order Number: 771234\n"
        "PO: 4500123\n"
        "PROBLEM REPORTED\n"
        "front door glass shattered\n"
    ),
    "oldcastle.pdf": "purchase order\nvendor: oldcastle\nPO #12345\nship to store 9\n",
}


class FakeAcquirer:
    """Returns canned text keyed by file name; unknown names fail."""

    def acquire_text(self, file_path):
        name = file_path.name
        if name not in DOCUMENTS:
            raise RuntimeError(f"cannot read {name}")
        return DOCUMENTS[name]


@pytest.fixture
def pipeline():
    return WorkOrderPipeline(acquirer=FakeAcquirer(), settings=ExtractionSettings())


def test_process_files_records_failures_without_aborting(pipeline, tmp_path):
    processor = BatchProcessor(pipeline=pipeline, max_workers=2)
    files = [tmp_path / "oldcastle.pdf", tmp_path / "broken.pdf", tmp_path / "clear_vision.pdf"]

    result = processor.process_files(files)

    assert result.total_files == 3
    assert result.successful == 2
    assert result.failed == 1
    assert result.errors[0]["file_path"] == str(tmp_path / "broken.pdf")
    assert [record["file_path"] for record in result.results] == [
        str(tmp_path / "clear_vision.pdf"), str(tmp_path / "oldcastle.pdf"),
    ]


def test_records_hold_analysis_and_fields(pipeline, tmp_path):
    result = BatchProcessor(pipeline=pipeline).process_files([tmp_path / "clear_vision.pdf"])
    record = result.results[0]
    assert record["status"] == "success"
    assert record["analysis"]["supplier"] is None
    assert record["fields"]["customer"] == "Clear Vision"
    assert record["fields"]["poNumber"] == "4500123"
    assert record["fields"]["workOrderNumber"] == "771234"
    assert 0.0 <= record["confidence"] <= 1.0


def test_summary_histograms(pipeline, tmp_path):
    files = [tmp_path / "oldcastle.pdf", tmp_path / "clear_vision.pdf"]
    summary = BatchProcessor(pipeline=pipeline).process_files(files).summary
    assert summary["batch_statistics"]["successful_extractions"] == 2
    assert summary["batch_statistics"]["success_rate_percent"] == 100.0
    assert summary["suppliers"] == {"Oldcastle": 1, "unknown": 1}
    assert summary["customer_profiles"] == {"Clear Vision": 1, "generic": 1}


def test_progress_callback_reports_every_file(pipeline, tmp_path):
    calls = []
    files = [tmp_path / "oldcastle.pdf", tmp_path / "broken.pdf"]
    BatchProcessor(pipeline=pipeline).process_files(files, lambda done, total: calls.append((done, total)))
    assert calls == [(1, 2), (2, 2)]


def test_results_are_saved_as_json(pipeline, tmp_path):
    output_dir = tmp_path / "out"
    processor = BatchProcessor(pipeline=pipeline, output_dir=output_dir)
    processor.process_files([tmp_path / "oldcastle.pdf"])

    saved = json.loads((output_dir / "oldcastle_workorder.json").read_text(encoding="utf-8"))
    assert saved["analysis"]["supplier"] == "Oldcastle"
    assert saved["analysis"]["poNumber"] == "12345"


def test_process_directory_picks_up_pdfs(pipeline, tmp_path):
    for name in ("oldcastle.pdf", "clear_vision.pdf", "notes.txt"):
        (tmp_path / name).write_bytes(b"%PDF-1.4")
    result = BatchProcessor(pipeline=pipeline).process_directory(tmp_path)
    assert result.total_files == 2
    assert result.successful == 2


def test_missing_directory_raises(pipeline, tmp_path):
    with pytest.raises(FileNotFoundError):
        BatchProcessor(pipeline=pipeline).process_directory(tmp_path / "missing")


def test_empty_batch(pipeline):
    result = BatchProcessor(pipeline=pipeline).process_files([])
    assert result.total_files == 0
    assert result.summary["batch_statistics"]["success_rate_percent"] == 0
