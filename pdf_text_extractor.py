"""
Digital PDF Text Extraction

Reads the embedded text layer of a PDF without any image analysis. pdfplumber is
tried first; PyPDF2 is the fallback when pdfplumber cannot open or parse the
file.
"""

import logging
from pathlib import Path
from typing import Union

import pdfplumber
import PyPDF2

# Configure logging
logger = logging.getLogger(__name__)


class DigitalTextError(Exception):
    """Raised when no backend could read the PDF's text layer."""


def extract_with_pdfplumber(pdf_path: Union[str, Path]) -> str:
    """Extract the text layer of every page with pdfplumber."""
    with pdfplumber.open(str(pdf_path)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def extract_with_pypdf2(pdf_path: Union[str, Path]) -> str:
    """Extract the text layer of every page with PyPDF2."""
    with open(pdf_path, "rb") as file:
        reader = PyPDF2.PdfReader(file)
        return "\n".join(page.extract_text() or "" for page in reader.pages)


class DigitalTextExtractor:
    """Reads a PDF's embedded text, trying each backend in turn."""

    def __init__(self):
        self.backends = [
            ("pdfplumber", extract_with_pdfplumber),
            ("PyPDF2", extract_with_pypdf2),
        ]

    def extract(self, pdf_path: Union[str, Path]) -> str:
        """
        Extract the embedded text of a PDF.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            Extracted text (possibly empty for image-only PDFs)

        Raises:
            DigitalTextError: If every backend failed to read the file
        """
        errors = []
        for name, backend in self.backends:
            try:
                text = backend(pdf_path)
                logger.debug(f"[PDF] {name} read {len(text)} chars from {Path(pdf_path).name}")
                return text
            except Exception as e:
                logger.warning(f"[PDF] {name} extraction error: {e}")
                errors.append(f"{name}: {e}")

        raise DigitalTextError("; ".join(errors))
