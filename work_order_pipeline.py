"""
Work Order Extraction Pipeline

Entry points consumed by the CRM:

* ``analyze_document(file_path)`` - acquire the text of a PDF and identify its
  supplier and PO number.
* ``extract_work_order_fields(text)`` - turn document text into a structured
  work-order record, using a customer profile when one matches and the generic
  extractor otherwise.

The two are independent; a caller may run either or both on the same text.
Neither raises for unreadable documents, missing tools or missing fields.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple, Union

from customer_profiles import CustomerProfile, PROFILE_REGISTRY, match_profile
from data_validator import DataValidator, ValidationResult
from extraction_schema import ExtractionResult, WorkOrderFields
from generic_extractor import GenericExtractor
from po_number_detector import PONumberDetector
from settings import ExtractionSettings, load_settings
from text_acquisition import HybridTextAcquirer
from text_normalizer import clean_value
from vendor_detector import VendorDetector

# Configure logging
logger = logging.getLogger(__name__)


class WorkOrderPipeline:
    """
    Composes text acquisition, supplier/PO detection and field extraction.

    One pipeline can serve many documents (and threads); its only shared
    resource is the OCR engine behind the acquirer, which is built once.
    """

    def __init__(
        self,
        acquirer: Optional[HybridTextAcquirer] = None,
        vendor_detector: Optional[VendorDetector] = None,
        po_detector: Optional[PONumberDetector] = None,
        registry: Optional[Tuple[CustomerProfile, ...]] = None,
        generic_extractor: Optional[GenericExtractor] = None,
        settings: Optional[ExtractionSettings] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            acquirer: Hybrid text acquirer (digital text with OCR fallback)
            vendor_detector: Supplier identifier
            po_detector: PO-number detector
            registry: Ordered customer profiles (defaults to PROFILE_REGISTRY)
            generic_extractor: Extractor for documents matching no profile
            settings: Extraction settings
        """
        self.settings = settings or load_settings()
        self.acquirer = acquirer or HybridTextAcquirer(settings=self.settings)
        self.vendor_detector = vendor_detector or VendorDetector()
        self.po_detector = po_detector or PONumberDetector()
        self.registry = PROFILE_REGISTRY if registry is None else registry
        self.generic_extractor = generic_extractor or GenericExtractor()
        self.validator = DataValidator(self.settings.confidence_threshold)

    def analyze_document(self, file_path: Union[str, Path]) -> ExtractionResult:
        """
        Acquire a PDF's text and detect its supplier and PO number.

        Args:
            file_path: Path to the PDF file

        Returns:
            ExtractionResult (empty text when nothing could be read)

        Raises:
            TypeError: If ``file_path`` is not a path
        """
        logger.info(f"[ANALYSIS] Analyzing {file_path}")
        text = self.acquirer.acquire_text(file_path)
        supplier = self.vendor_detector.identify_supplier(text)
        po_number = self.po_detector.identify_number(text)

        result = ExtractionResult(text=text, supplier=supplier, po_number=po_number)
        logger.info(f"[ANALYSIS] Result: supplier={supplier}, PO={po_number}, "
                    f"text length={result.text_length}")
        return result

    def extract_work_order_fields(self, text: Optional[str]) -> WorkOrderFields:
        """
        Extract a structured work-order record from document text.

        Args:
            text: Document text; None is treated as empty

        Returns:
            WorkOrderFields; fields that could not be found are None

        Raises:
            TypeError: If ``text`` is neither a string nor None
        """
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise TypeError(f"text must be a str, got {type(text).__name__}")

        logger.info(f"[EXTRACT] Input text length: {len(text)} chars")
        raw_text = text[:self.settings.raw_text_limit]
        if len(text) < self.settings.min_field_text_length:
            logger.info("[EXTRACT] Text too short, returning empty result")
            return WorkOrderFields.empty(raw_text)

        profile = match_profile(text, self.registry)
        if profile is not None:
            extraction = profile.extract(text)
            customer = profile.display_name
            billing_address = profile.billing_address
        else:
            extraction = self.generic_extractor.extract(text)
            customer = extraction.customer
            billing_address = None

        po_number = extraction.po_number
        if po_number is None and not extraction.skip_po_number:
            po_number = self.po_detector.identify_number(text)
            # A bare order number is the work order itself, not a purchase order
            if po_number is not None and po_number == clean_value(extraction.work_order_number):
                logger.info(f"[EXTRACT] Ignoring PO candidate {po_number}: same as the work order number")
                po_number = None

        fields = WorkOrderFields(
            customer=clean_value(customer),
            billing_address=clean_value(billing_address),
            work_order_number=clean_value(extraction.work_order_number),
            po_number=clean_value(po_number),
            site_location=clean_value(extraction.site_location),
            site_address=clean_value(extraction.site_address),
            problem_description=clean_value(extraction.problem_description),
            detected_customer_profile=profile is not None,
            raw_text=raw_text,
        )

        logger.info(f"[EXTRACT] Customer: {fields.customer or '(not found)'}")
        logger.info(f"[EXTRACT] PO Number: {fields.po_number or '(not found)'}")
        logger.info(f"[EXTRACT] Work Order #: {fields.work_order_number or '(not found)'}")
        logger.info(f"[EXTRACT] Site Location: {fields.site_location or '(not found)'}")
        logger.info(f"[EXTRACT] Site Address: {fields.site_address or '(not found)'}")
        logger.info(f"[EXTRACT] Problem: {fields.problem_description or '(not found)'}")
        return fields

    def extract_and_score(self, text: Optional[str]) -> Tuple[WorkOrderFields, ValidationResult]:
        """
        Extract work-order fields and score their completeness.

        Args:
            text: Document text; None is treated as empty

        Returns:
            Tuple of (WorkOrderFields, ValidationResult)
        """
        fields = self.extract_work_order_fields(text)
        return fields, self.validator.validate_fields(fields)


@lru_cache(maxsize=1)
def get_default_pipeline() -> WorkOrderPipeline:
    """Process-wide pipeline built from the default settings."""
    return WorkOrderPipeline()


def analyze_document(file_path: Union[str, Path]) -> ExtractionResult:
    """Analyze a PDF with the default pipeline."""
    return get_default_pipeline().analyze_document(file_path)


def extract_work_order_fields(text: Optional[str]) -> WorkOrderFields:
    """Extract work-order fields with the default pipeline."""
    return get_default_pipeline().extract_work_order_fields(text)
