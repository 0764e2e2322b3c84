"""
TrueSource Work Order Extractor

TrueSource dispatches are "Label: value" forms. They never carry a usable PO
reference (the numbers near "PO" labels are TrueSource's internal billing
references), so this profile suppresses PO-number detection altogether.
"""

import logging
import re
from typing import Optional

from extraction_schema import ProfileExtraction
from pattern_chain import ChainStep, first_value, identifier, min_length
from text_normalizer import (
    clean_description,
    clean_location,
    clean_reference,
    find_address_block,
    labelled_address,
    section_lines,
)

# Configure logging
logger = logging.getLogger(__name__)

_MULTILINE = re.IGNORECASE | re.MULTILINE

_FORM_LABEL_RE = re.compile(
    r"^(?:work\s*order|wo|site\s*name|site\s*store\s*number|site\s*address|customer\s*name|"
    r"description\s*of\s*work|service\s*description|nte|priority|trade|scheduled|contact)\b",
    re.IGNORECASE,
)
_SITE_ADDRESS_RE = re.compile(r"^\s*site\s*address\s*:\s*(.+)$", _MULTILINE)


def _labelled_site_address(text: str) -> Optional[str]:
    return labelled_address(text, _SITE_ADDRESS_RE)


def _description_block(text: str) -> Optional[str]:
    lines = section_lines(text, r"description\s*of\s*work|service\s*description", stop=_FORM_LABEL_RE)
    return " ".join(lines) or None


class TrueSourceExtractor:
    """Field chains for TrueSource work orders."""

    def __init__(self):
        reference = identifier(min_chars=3)
        description = min_length(5)

        self.work_order_chain = [
            ChainStep(r"^\s*work\s*order\s*(?:number|no\.?|#)?\s*:\s*#?\s*(\S+)", "work_order_label",
                      validator=reference, transform=clean_reference, flags=_MULTILINE),
            ChainStep(r"^\s*wo\s*(?:number|no\.?|#)?\s*:\s*#?\s*(\S+)", "wo_label",
                      validator=reference, transform=clean_reference, flags=_MULTILINE),
        ]
        self.site_location_chain = [
            ChainStep(r"^\s*site\s*name\s*:\s*(.+)$", "site_name",
                      transform=clean_location, flags=_MULTILINE),
            ChainStep(r"^\s*site\s*store\s*number\s*:\s*(.+)$", "site_store_number",
                      transform=clean_location, flags=_MULTILINE),
        ]
        self.site_address_chain = [
            ChainStep(find_address_block, "address_block"),
            ChainStep(_labelled_site_address, "site_address_label"),
        ]
        self.problem_chain = [
            ChainStep(r"^\s*description\s*of\s*work\s*:\s*(.+)$", "description_of_work",
                      validator=description, transform=clean_description, flags=_MULTILINE),
            ChainStep(r"^\s*service\s*description\s*:\s*(.+)$", "service_description",
                      validator=description, transform=clean_description, flags=_MULTILINE),
            ChainStep(_description_block, "description_block",
                      validator=description, transform=clean_description),
        ]

    def extract(self, text: str) -> ProfileExtraction:
        """
        Extract work-order fields from a TrueSource document.

        Args:
            text: Document text

        Returns:
            ProfileExtraction with ``skip_po_number`` set
        """
        text = text or ""
        result = ProfileExtraction(
            work_order_number=first_value(text, self.work_order_chain, "work_order_number"),
            site_location=first_value(text, self.site_location_chain, "site_location"),
            site_address=first_value(text, self.site_address_chain, "site_address"),
            problem_description=first_value(text, self.problem_chain, "problem_description"),
            skip_po_number=True,
        )
        logger.info(f"[EXTRACT] TrueSource: WO={result.work_order_number}, site={result.site_location}")
        return result


def extract_truesource(text: str) -> ProfileExtraction:
    """Convenience function for TrueSource extraction."""
    return TrueSourceExtractor().extract(text)
