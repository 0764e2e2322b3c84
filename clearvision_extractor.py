"""
Clear Vision Work Order Extractor

Clear Vision work orders are laid out as titled sections:

    SERVICE LOCATION
    #122 Sweetgreen Restaurant #122
    1471 N. Milwaukee Ave Wicker Park
    Chicago IL 60622

    PROBLEM REPORTED
    Front door glass shattered ...

The site name is the first line of the SERVICE LOCATION block (with the store
number prefix dropped) and the address is rebuilt from the street and
city/state/zip lines beneath it.
"""

import logging
import re
from typing import List, Optional

from extraction_schema import ProfileExtraction
from pattern_chain import ChainStep, first_value, identifier, min_length
from text_normalizer import (
    clean_description,
    clean_location,
    clean_reference,
    collapse_whitespace,
    find_address_block,
    format_address,
    is_street_line,
    parse_city_state_zip,
    section_lines,
)

# Configure logging
logger = logging.getLogger(__name__)

# Lines that open the next section of a Clear Vision work order
SECTION_HEADER_RE = re.compile(
    r"^(?:service\s+location|problem\s+reported|problem(?:\s+description)?|additional\s+details|"
    r"description\s+of\s+work|work\s+order(?:\s+(?:number|no\.?|#))?|p\.?o\.?(?:\s+(?:number|#))?|"
    r"nte|priority|trade|category|site\s+contact|contact|requested\s+by|due\s+date|"
    r"scheduled(?:\s+date)?|notes|instructions|check[\s-]*in)\b\s*[:#]?",
    re.IGNORECASE,
)

_STORE_PREFIX_RE = re.compile(r"^#\s*\d+\s*[-:]?\s*")
_MULTILINE = re.IGNORECASE | re.MULTILINE


def service_location_block(text: str) -> List[str]:
    """Lines of the SERVICE LOCATION section."""
    return section_lines(text, r"service\s+location", stop=SECTION_HEADER_RE)


def _site_name_from_block(text: str) -> Optional[str]:
    block = service_location_block(text)
    if not block or is_street_line(block[0]):
        return None
    return clean_location(_STORE_PREFIX_RE.sub("", block[0]))


def _site_name_inline(text: str) -> Optional[str]:
    match = re.search(r"^\s*service\s+location\s*:\s*(.+)$", text, _MULTILINE)
    if not match:
        return None
    # "Service Location: #122 Sweetgreen - Chicago" names the site before the dash
    name = match.group(1).split(" - ")[0]
    if is_street_line(name):
        return None
    return clean_location(_STORE_PREFIX_RE.sub("", name.strip()))


def address_from_lines(lines: List[str]) -> Optional[str]:
    """
    Rebuild "Street, City, ST ZIP" from the lines of an address block.

    A street line may wrap onto the following line; up to two continuation
    lines are joined before the city/state/zip line.

    Args:
        lines: Block lines in document order

    Returns:
        Formatted address or None when no street line is present
    """
    for index, line in enumerate(lines):
        if not is_street_line(line):
            continue
        street = line
        for following in lines[index + 1:index + 3]:
            if parse_city_state_zip(following):
                return format_address(street, following)
            street = f"{street} {following}"
        return format_address(line)
    return None


def _site_address_from_block(text: str) -> Optional[str]:
    return address_from_lines(service_location_block(text))


def _problem_from_block(text: str) -> Optional[str]:
    lines = section_lines(text, r"problem\s+reported", stop=SECTION_HEADER_RE)
    return " ".join(lines) or None


def _details_from_block(text: str) -> Optional[str]:
    lines = section_lines(text, r"additional\s+details", stop=SECTION_HEADER_RE)
    return " ".join(lines) or None


class ClearVisionExtractor:
    """Field chains for Clear Vision work orders."""

    def __init__(self):
        reference = identifier(min_chars=3)
        description = min_length(5)

        self.work_order_chain = [
            ChainStep(r"work\s*order\s*(?:number|no\.?|#)\s*[:#]?\s*#?\s*([a-z0-9][a-z0-9-]{2,})",
                      "work_order_number", validator=reference, transform=clean_reference),
            ChainStep(r"work\s*order\s*(?:number|#)?\s*:?\s*\n\s*#?([a-z0-9][a-z0-9-]{2,})",
                      "work_order_next_line", validator=reference, transform=clean_reference),
            ChainStep(r"\bwo\s*#\s*:?\s*([a-z0-9][a-z0-9-]{2,})",
                      "wo_hash", validator=reference, transform=clean_reference),
        ]
        self.site_location_chain = [
            ChainStep(_site_name_from_block, "service_location_block"),
            ChainStep(_site_name_inline, "service_location_inline"),
        ]
        self.site_address_chain = [
            ChainStep(_site_address_from_block, "service_location_block"),
            ChainStep(find_address_block, "address_block"),
        ]
        self.problem_chain = [
            ChainStep(_problem_from_block, "problem_reported_block",
                      validator=description, transform=clean_description),
            ChainStep(r"^\s*problem(?:\s+reported|\s+description)?\s*:\s*(.+)$", "problem_inline",
                      validator=description, transform=clean_description, flags=_MULTILINE),
            ChainStep(r"^\s*additional\s+details\s*:\s*(.+)$", "additional_details_inline",
                      validator=description, transform=clean_description, flags=_MULTILINE),
            ChainStep(_details_from_block, "additional_details_block",
                      validator=description, transform=clean_description),
            ChainStep(r"description\s+of\s+work\s*:?\s*(.+)", "description_of_work",
                      validator=description, transform=clean_description),
        ]
        self.po_chain = [
            ChainStep(r"^\s*p\.?o\.?\s*(?:number|no\.?)?\s*[:#]\s*#?\s*([a-z0-9][a-z0-9-]{2,})", "po_label",
                      validator=reference, transform=clean_reference, flags=_MULTILINE),
        ]

    def extract(self, text: str) -> ProfileExtraction:
        """
        Extract work-order fields from a Clear Vision document.

        Args:
            text: Document text

        Returns:
            ProfileExtraction; fields that could not be found are None
        """
        text = text or ""
        result = ProfileExtraction(
            work_order_number=first_value(text, self.work_order_chain, "work_order_number"),
            site_location=first_value(text, self.site_location_chain, "site_location"),
            site_address=first_value(text, self.site_address_chain, "site_address"),
            problem_description=first_value(text, self.problem_chain, "problem_description"),
            po_number=first_value(text, self.po_chain, "po_number"),
        )
        logger.info(f"[EXTRACT] Clear Vision: WO={result.work_order_number}, "
                    f"site={result.site_location}, address={collapse_whitespace(result.site_address or '')}")
        return result


def extract_clear_vision(text: str) -> ProfileExtraction:
    """Convenience function for Clear Vision extraction."""
    return ClearVisionExtractor().extract(text)
