"""
Hybrid Text Acquisition

Gets the text of a work-order PDF as cheaply as possible: the embedded text
layer first, OCR of page one only when the digital yield is too short to be a
real document (a scanned PDF typically yields nothing, or a few stray
characters from a stamp or footer).

The returned text is always lower-cased; every downstream pattern is written
against lower-case text.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Sequence, Union

from ocr_engine import OcrReader
from pdf_rasterizer import Rasterizer, rasterized_first_page
from pdf_text_extractor import DigitalTextExtractor
from settings import ExtractionSettings, load_settings

# Configure logging
logger = logging.getLogger(__name__)


class HybridTextAcquirer:
    """
    Chooses between digital extraction and OCR for a PDF.

    Collaborators are injected so a single OCR reader (and therefore a single
    OCR engine) can be shared by every acquirer in the process.
    """

    def __init__(
        self,
        digital_extractor: Optional[DigitalTextExtractor] = None,
        ocr_reader: Optional[OcrReader] = None,
        rasterizers: Optional[Sequence[Rasterizer]] = None,
        settings: Optional[ExtractionSettings] = None,
    ):
        """
        Initialize the acquirer.

        Args:
            digital_extractor: Reader for the embedded text layer
            ocr_reader: OCR reader (shares its engine handle)
            rasterizers: Ordered rasterizers for page one (built from settings when omitted)
            settings: Extraction settings
        """
        self.settings = settings or load_settings()
        self.digital_extractor = digital_extractor or DigitalTextExtractor()
        self.ocr_reader = ocr_reader or OcrReader(settings=self.settings)
        self.rasterizers = rasterizers
        self.min_text_length = self.settings.min_digital_text_length

    def extract_digital(self, file_path: Union[str, Path]) -> str:
        """Digital yield, lower-cased; any failure counts as an empty yield."""
        try:
            text = (self.digital_extractor.extract(file_path) or "").lower()
            logger.info(f"[PDF] Digital extraction got {len(text)} chars")
            return text
        except Exception as e:
            logger.warning(f"[PDF] Digital extraction failed: {e}")
            return ""

    def extract_ocr(self, file_path: Union[str, Path]) -> str:
        """OCR yield of page one, lower-cased; any failure counts as an empty yield."""
        logger.info(f"[OCR] Starting OCR extraction for: {Path(file_path).name}")
        try:
            with rasterized_first_page(file_path, rasterizers=self.rasterizers, settings=self.settings) as image_path:
                if image_path is None:
                    logger.warning("[OCR] Could not convert PDF to image")
                    return ""
                return (self.ocr_reader.recognize(image_path) or "").lower()
        except Exception as e:
            logger.error(f"[OCR] Error during extraction: {e}")
            return ""

    def acquire_text(self, file_path: Union[str, Path]) -> str:
        """
        Acquire the lower-cased text of a PDF.

        OCR runs only when the digital yield is shorter than the configured
        minimum, and its output replaces the digital yield only when strictly
        longer.

        Args:
            file_path: Path to the PDF file

        Returns:
            Lower-cased document text; empty when both paths fail

        Raises:
            TypeError: If ``file_path`` is not a path
        """
        if not isinstance(file_path, (str, os.PathLike)):
            raise TypeError(f"file_path must be a str or path, got {type(file_path).__name__}")

        logger.info(f"[PDF] Attempting text extraction from: {Path(file_path).name}")
        text = self.extract_digital(file_path)

        if len(text) >= self.min_text_length:
            logger.info(f"[PDF] Using digital extraction result ({len(text)} chars)")
            return text

        logger.info(f"[PDF] Text too short ({len(text)} chars), trying OCR...")
        ocr_text = self.extract_ocr(file_path)
        if len(ocr_text) > len(text):
            logger.info(f"[PDF] OCR extracted {len(ocr_text)} chars (using OCR result)")
            return ocr_text

        logger.info(f"[PDF] OCR got {len(ocr_text)} chars (keeping digital result)")
        return text
