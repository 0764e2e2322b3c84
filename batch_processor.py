"""
Batch Work Order Processing Module

Runs document analysis and field extraction over many PDFs on a thread pool.
All workers share one pipeline, so the OCR engine is constructed at most once
for the whole batch. A document that fails is recorded and never aborts the
batch.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Any, Optional, Callable, Union
from pathlib import Path
from dataclasses import dataclass

from work_order_pipeline import WorkOrderPipeline

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Container for batch processing results."""
    total_files: int
    successful: int
    failed: int
    processing_time: float
    results: List[Dict[str, Any]]
    errors: List[Dict[str, Any]]
    summary: Dict[str, Any]


class BatchProcessor:
    """
    Processes multiple work-order PDFs concurrently.
    """

    def __init__(
        self,
        pipeline: Optional[WorkOrderPipeline] = None,
        max_workers: Optional[int] = None,
        output_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize the batch processor.

        Args:
            pipeline: Shared work-order pipeline
            max_workers: Maximum number of concurrent workers (defaults to the setting)
            output_dir: When given, each record is also saved there as JSON
        """
        self.pipeline = pipeline or WorkOrderPipeline()
        self.max_workers = max_workers or self.pipeline.settings.max_workers
        self.output_dir = Path(output_dir) if output_dir else None
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"BatchProcessor initialized with {self.max_workers} workers")

    def process_directory(
        self,
        input_dir: Union[str, Path],
        file_pattern: str = "*.pdf",
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> BatchResult:
        """
        Process all PDF files in a directory.

        Args:
            input_dir: Directory containing PDF files
            file_pattern: File pattern to match (default: "*.pdf")
            progress_callback: Optional callback receiving (done, total)

        Returns:
            BatchResult containing processing results

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        input_path = Path(input_dir)
        if not input_path.exists():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")

        pdf_files = sorted(input_path.glob(file_pattern))
        if not pdf_files:
            logger.warning(f"No PDF files found in {input_dir} matching pattern {file_pattern}")
        else:
            logger.info(f"Found {len(pdf_files)} PDF files to process")
        return self.process_files(pdf_files, progress_callback)

    def process_files(
        self,
        file_paths: List[Union[str, Path]],
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> BatchResult:
        """
        Process a list of PDF files.

        Args:
            file_paths: List of PDF file paths
            progress_callback: Optional callback receiving (done, total)

        Returns:
            BatchResult containing processing results
        """
        start_time = time.time()
        pdf_files = [Path(p) for p in file_paths]
        total_files = len(pdf_files)

        results = []
        errors = []

        logger.info(f"Starting batch processing of {total_files} files")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self._process_single_file, pdf_file): pdf_file
                for pdf_file in pdf_files
            }

            for i, future in enumerate(as_completed(future_to_file)):
                pdf_file = future_to_file[future]
                try:
                    record = future.result()
                    results.append(record)
                    if self.output_dir:
                        self._save_individual_result(pdf_file, record)
                except Exception as e:
                    errors.append({
                        'file_path': str(pdf_file),
                        'status': 'failed',
                        'errors': [f"Processing error: {e}"],
                    })
                    logger.error(f"Failed to process {pdf_file.name}: {e}")

                if progress_callback:
                    progress_callback(i + 1, total_files)

        processing_time = time.time() - start_time
        results.sort(key=lambda record: record['file_path'])

        batch_result = BatchResult(
            total_files=total_files,
            successful=len(results),
            failed=len(errors),
            processing_time=processing_time,
            results=results,
            errors=errors,
            summary=self._create_batch_summary(results, total_files, processing_time)
        )

        logger.info(f"Batch processing completed: {len(results)}/{total_files} successful "
                    f"in {processing_time:.2f}s")
        return batch_result

    def _process_single_file(self, pdf_file: Path) -> Dict[str, Any]:
        """
        Analyze one PDF and extract its work-order fields.

        Args:
            pdf_file: Path to the PDF file

        Returns:
            Per-file record with the analysis, fields and confidence
        """
        started = time.time()
        logger.info(f"Processing {pdf_file.name}")

        analysis = self.pipeline.analyze_document(pdf_file)
        fields, validation = self.pipeline.extract_and_score(analysis.text)

        return {
            'file_path': str(pdf_file),
            'status': 'success',
            'analysis': analysis.to_dict(),
            'fields': fields.to_dict(),
            'confidence': validation.confidence,
            'is_confident': validation.is_confident,
            'missing_fields': validation.missing_fields,
            'processing_time': time.time() - started,
        }

    def _save_individual_result(self, pdf_file: Path, record: Dict[str, Any]) -> None:
        """Save one record as ``<stem>_workorder.json`` in the output directory."""
        output_file = self.output_dir / f"{pdf_file.stem}_workorder.json"
        try:
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
            logger.info(f"Saved result to {output_file}")
        except OSError as e:
            logger.error(f"Error saving result for {pdf_file.name}: {e}")

    def _create_batch_summary(
        self,
        results: List[Dict[str, Any]],
        total_files: int,
        processing_time: float
    ) -> Dict[str, Any]:
        """
        Create batch processing summary.

        Args:
            results: Successful per-file records
            total_files: Total number of files submitted
            processing_time: Total processing time

        Returns:
            Summary dictionary
        """
        suppliers: Dict[str, int] = {}
        customers: Dict[str, int] = {}
        for record in results:
            supplier = record['analysis']['supplier'] or 'unknown'
            suppliers[supplier] = suppliers.get(supplier, 0) + 1
            fields = record['fields']
            customer = fields['customer'] if fields['detectedCustomerProfile'] else 'generic'
            customers[customer] = customers.get(customer, 0) + 1

        successful = len(results)
        return {
            "batch_statistics": {
                "total_files": total_files,
                "successful_extractions": successful,
                "failed_extractions": total_files - successful,
                "success_rate_percent": round(successful / total_files * 100, 2) if total_files else 0,
                "total_processing_time_seconds": round(processing_time, 2),
                "average_time_per_file_seconds": round(processing_time / total_files, 2) if total_files else 0,
            },
            "suppliers": suppliers,
            "customer_profiles": customers,
            "confident_records": sum(1 for record in results if record['is_confident']),
        }
