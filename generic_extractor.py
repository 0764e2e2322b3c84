"""
Generic Work Order Extractor

Used when no customer profile matches. The label patterns here are broad and
unanchored ("Bill To", "Ship To", "Description", store-name heuristics) so they
cover the common conventions of unknown senders, at the cost of precision.
"""

import logging
import re
from typing import List, Optional

from extraction_schema import ProfileExtraction
from pattern_chain import ChainStep, first_value, identifier, length_between, steps_from
from text_normalizer import (
    STREET_SUFFIX,
    clean_description,
    clean_location,
    clean_reference,
    collapse_whitespace,
    find_address_block,
    normalize_address,
)

# Configure logging
logger = logging.getLogger(__name__)

# A capture that is really a street address ("123 Main St")
_ADDRESS_LIKE_RE = re.compile(r"^\d+\s+\w+\s+" + STREET_SUFFIX + r"\b", re.IGNORECASE)
_MULTI_COLUMN_RE = re.compile(r"bill\s*to\s+ship\s*to\s*\n+\s*([^\n]+)", re.IGNORECASE)
_SHIP_TO_BLOCK_RE = re.compile(r"ship\s*to[:\s]*\n?([\s\S]*?)(?=\n\s*\n|bill\s*to|$)", re.IGNORECASE)

STORE_NAME_RE = re.compile(
    r"([a-z\s]+(?:store|shop|restaurant|cafe|pizza|market|retail|caesars|mcdonald|starbucks|dunkin|"
    r"subway|target|walmart|walgreens|cvs)[a-z\s]*(?:#|number|no\.?)?\s*\d+)",
    re.IGNORECASE,
)

GLASS_DAMAGE_PATTERNS = [
    r"(?:broken|cracked|shattered|damaged)\s+(?:glass|window|door|mirror)",
    r"(?:glass|window|door|mirror)\s+(?:is|was|needs?|requires?)\s+(?:broken|cracked|replaced|fixed|repaired)",
    r"replace\s+(?:glass|window|door|storefront)",
    r"door\s*closer",
    r"emergency\s+(?:board[- ]?up|glass|repair)",
]

_ADDRESS_BODY = r"\d+\s+[a-z0-9\s.]+" + STREET_SUFFIX
ADDRESS_PATTERNS = [
    # street, city, state and zip
    (r"(" + _ADDRESS_BODY + r"[.,]?\s*(?:#\s*\d+|suite\s*\d+|ste\s*\d+|unit\s*\d+)?[,\s]+[a-z\s]+[,\s]+[a-z]{2}\s*\d{5}(?:-\d{4})?)",
     "full_address"),
    # street, city and state
    (r"(" + _ADDRESS_BODY + r"[.,]?\s*[,\s]+[a-z\s]+[,\s]+[a-z]{2})\b", "street_city_state"),
    (r"(" + _ADDRESS_BODY + r"(?:\s*#?\s*\d+)?)", "street_only"),
]


def _drop_pipe_tail(value: str) -> str:
    return re.sub(r"\|.*$", "", value).strip()


def _clean_customer(value: str) -> Optional[str]:
    name = _drop_pipe_tail(re.sub(r"^\d+\s*", "", value.strip()))
    if re.match(r"^ship\s*to$", name, re.IGNORECASE) or _ADDRESS_LIKE_RE.match(name):
        return None
    return name


def _clean_site(value: str) -> Optional[str]:
    location = _drop_pipe_tail(value)
    if _ADDRESS_LIKE_RE.match(location):
        return None
    return location


def _multi_column_part(index: int):
    """Matcher taking column ``index`` from the line under "Bill To  Ship To"."""
    def matcher(text: str) -> Optional[str]:
        match = _MULTI_COLUMN_RE.search(text)
        if not match:
            return None
        parts = [part for part in re.split(r"\s{2,}|\|", match.group(1).strip()) if part.strip()]
        return parts[index] if len(parts) > index else None
    return matcher


def _store_name(text: str) -> Optional[str]:
    match = STORE_NAME_RE.search(text)
    return match.group(1) if match else None


def _glass_damage_context(text: str) -> Optional[str]:
    """The text around the first glass-damage phrase."""
    for pattern in GLASS_DAMAGE_PATTERNS:
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            context = text[max(0, match.start() - 50):match.end() + 100]
            return collapse_whitespace(context)
    return None


def _ship_to_block(text: str) -> Optional[str]:
    match = _SHIP_TO_BLOCK_RE.search(text)
    return match.group(1) if match else None


class GenericExtractor:
    """Label-keyed field chains for documents from unknown senders."""

    def __init__(self):
        name_length = length_between(3, 50)
        site_length = length_between(3, 60)
        description_length = length_between(5, 200)
        reference = identifier(min_chars=3)

        self.customer_chain = steps_from([
            (r"bill\s*to\s*\n+\s*([^\n]{3,50})", "bill_to_next_line"),
            (r"bill\s*to[:\s]+(?!ship)([^\n]{3,50})", "bill_to"),
            (r"customer(?:\s*name)?[:\s]+([^\n]{3,50})", "customer"),
            (r"client[:\s]+([^\n]{3,50})", "client"),
            (r"sold\s*to\s*\n+\s*([^\n]{3,50})", "sold_to_next_line"),
            (r"att(?:n|ention)[:\s]+([^\n]{3,50})", "attention"),
        ], validator=name_length, transform=_clean_customer) + [
            ChainStep(_multi_column_part(0), "bill_to_ship_to_columns",
                      validator=name_length, transform=_clean_customer),
        ]

        self.work_order_chain = steps_from([
            (r"\bwo\s*[#:\-]\s*([a-z0-9][a-z0-9\-]{2,20})", "wo"),
            (r"work\s*order\s*[#:\-]?\s*([a-z0-9][a-z0-9\-]{2,20})", "work_order"),
            (r"service\s*order\s*[#:\-]?\s*([a-z0-9][a-z0-9\-]{2,20})", "service_order"),
            (r"job\s*(?:#|number|no\.?)\s*[:\-]?\s*([a-z0-9][a-z0-9\-]{2,20})", "job_number"),
            (r"(?<!purchase\s)order\s*#\s*([a-z0-9][a-z0-9\-]{2,20})", "order_hash"),
            (r"ticket\s*[#:\-]?\s*([a-z0-9][a-z0-9\-]{2,20})", "ticket"),
        ], validator=reference, transform=clean_reference)

        self.site_location_chain = steps_from([
            (r"ship\s*to\s*\n+\s*([^\n]{3,60})", "ship_to_next_line"),
            (r"ship\s*to[:\s]+([^\n]{3,60})", "ship_to"),
            (r"service\s*location[:\s]+([^\n]{3,60})", "service_location"),
            (r"job\s*site[:\s]+([^\n]{3,60})", "job_site"),
            (r"site\s*name[:\s]+([^\n]{3,60})", "site_name"),
            (r"(?<!service\s)location[:\s]+([^\n]{3,60})", "location"),
            (r"store\s*[#:\-]?\s*([^\n]{3,60})", "store"),
        ], validator=site_length, transform=_clean_site) + [
            ChainStep(_multi_column_part(1), "bill_to_ship_to_columns",
                      validator=site_length, transform=_clean_site),
            ChainStep(_store_name, "store_name", validator=length_between(5, 60)),
        ]

        self.site_address_chain = [ChainStep(find_address_block, "address_block")] + steps_from(
            ADDRESS_PATTERNS,
            validator=length_between(10, 150),
            transform=lambda value: _drop_pipe_tail(collapse_whitespace(value)),
        )

        self.problem_chain = steps_from([
            (r"problem(?:\s*description)?[:\s]+([^\n]{5,200})", "problem"),
            (r"(?<!job\s)description[:\s]+([^\n]{5,200})", "description"),
            (r"work\s*description[:\s]+([^\n]{5,200})", "work_description"),
            (r"scope(?:\s*of\s*work)?[:\s]+([^\n]{5,200})", "scope_of_work"),
            (r"issue[:\s]+([^\n]{5,200})", "issue"),
            (r"service\s*requested[:\s]+([^\n]{5,200})", "service_requested"),
            (r"work\s*to\s*be\s*(?:performed|done)[:\s]+([^\n]{5,200})", "work_to_be_performed"),
            (r"reason(?:\s*for\s*call)?[:\s]+([^\n]{5,200})", "reason_for_call"),
            (r"notes[:\s]+([^\n]{5,200})", "notes"),
            (r"service\s*call[:\s]+([^\n]{5,200})", "service_call"),
        ], validator=description_length, transform=_drop_pipe_tail) + [
            ChainStep(_glass_damage_context, "glass_damage_keywords", validator=length_between(10, 300)),
        ]

    def extract_customer(self, text: str) -> Optional[str]:
        return clean_location(first_value(text, self.customer_chain, "customer"))

    def extract_work_order_number(self, text: str) -> Optional[str]:
        return first_value(text, self.work_order_chain, "work_order_number")

    def extract_site_location(self, text: str) -> Optional[str]:
        return clean_location(first_value(text, self.site_location_chain, "site_location"))

    def extract_site_address(self, text: str) -> Optional[str]:
        """Street address, searched inside the Ship To block first."""
        search_texts: List[str] = []
        ship_to = _ship_to_block(text)
        if ship_to:
            search_texts.append(ship_to)
        search_texts.append(text)
        for search_text in search_texts:
            address = first_value(search_text, self.site_address_chain, "site_address")
            if address:
                return normalize_address(address)
        return None

    def extract_problem_description(self, text: str) -> Optional[str]:
        return clean_description(first_value(text, self.problem_chain, "problem_description"))

    def extract(self, text: str) -> ProfileExtraction:
        """
        Extract work-order fields from a document of an unknown sender.

        Args:
            text: Document text

        Returns:
            ProfileExtraction; the PO number is left to the generic PO detector
        """
        text = text or ""
        result = ProfileExtraction(
            customer=self.extract_customer(text),
            work_order_number=self.extract_work_order_number(text),
            site_location=self.extract_site_location(text),
            site_address=self.extract_site_address(text),
            problem_description=self.extract_problem_description(text),
        )
        logger.info(f"[EXTRACT] Generic: customer={result.customer}, WO={result.work_order_number}, "
                    f"site={result.site_location}")
        return result
