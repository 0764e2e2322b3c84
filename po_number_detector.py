"""
PO Number Detection

Finds the purchase-order number on a supplier document. Label patterns are
tried from most to least reliable; loose patterns such as a bare "PO" followed
by digits come last so they cannot shadow a properly labelled number elsewhere
in the document.
"""

import logging
from typing import List, Optional

from pattern_chain import ChainStep, first_accepted, identifier

# Configure logging
logger = logging.getLogger(__name__)

# Captured values that are words, not reference numbers
PO_STOP_WORDS = ("box", "the", "and", "for", "number", "num", "no")

# (pattern, label) in priority order
PO_NUMBER_PATTERNS = [
    # "PO# 12345", "PO #12345"
    (r"\bpo\s*#\s*:?\s*([a-z0-9][a-z0-9-]{1,})", "po_hash"),
    # "P.O. # 12345", "P.O. No. 12345"; the value may sit on the next line
    (r"\bp\.o\.?\s*(?:#|no\.?|number)?\s*:?\s*\n?\s*([a-z0-9][a-z0-9-]{2,})", "p_o_label"),
    # OCR misread of "P.O. NO."
    (r"\bp\.c\.?\s*(?:#|no\.?|number)?\s*:?\s*\n?\s*([a-z0-9][a-z0-9-]{2,})", "p_c_misread"),
    (r"purchase\s+order\s*[#:]*\s*([a-z0-9][a-z0-9-]{2,})", "purchase_order"),
    # "Work Order #" labels the work order, not the purchase order
    (r"(?<!work)(?<!work\s)order\s*(?:#|number)\s*:?\s*([a-z0-9][a-z0-9-]{2,})", "order_number"),
    (r"\bpo\s+(?:number|no\.?)\s*:?\s*([a-z0-9][a-z0-9-]{2,})", "po_number_label"),
    # Loose fallbacks
    (r"\bpo\s+([0-9]{3,})\b", "bare_po"),
    (r"(?:\bp\.?[oc]\.?\s*)?\bno\.?\s*\n+\s*([0-9]{5,})", "no_label_next_line"),
    # "p.o. no.\n2 02779415": a stray OCR digit before the number
    (r"\bp\.?o\.?\s*no\.?\s*\n+\s*\d?\s*([0-9]{5,})", "po_no_ocr_noise"),
]


def _normalize_number(raw: str) -> str:
    return raw.strip().upper()


def build_po_number_chain() -> List[ChainStep]:
    """
    Build the ordered PO-number chain.

    Returns:
        List of chain steps sharing the reference-number validator
    """
    validator = identifier(min_chars=3, stop_words=PO_STOP_WORDS)
    return [
        ChainStep(pattern, label, validator=validator, transform=_normalize_number)
        for pattern, label in PO_NUMBER_PATTERNS
    ]


class PONumberDetector:
    """Detects purchase-order numbers in document text."""

    def __init__(self):
        self.chain = build_po_number_chain()

    def identify_number(self, text: Optional[str]) -> Optional[str]:
        """
        Return the first acceptable PO number in the text.

        Args:
            text: Document text (lower-cased by acquisition, any case accepted)

        Returns:
            Upper-cased PO number or None
        """
        match = first_accepted(text or "", self.chain, "po_number")
        if match is None:
            logger.info("[ANALYSIS] No PO number found")
            return None
        logger.info(f"[ANALYSIS] PO number {match.value} found via '{match.label}'")
        return match.value


def identify_number(text: Optional[str]) -> Optional[str]:
    """Convenience wrapper around ``PONumberDetector.identify_number``."""
    return PONumberDetector().identify_number(text)
