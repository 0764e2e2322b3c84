"""
Pattern-Map Field Extraction

A pattern map is the simplest profile strategy: one regular expression per
field, whose first capture group is the value. It suits partners whose work
orders are plain "Label: value" forms.
"""

import logging
import re
from typing import Callable, Dict, Optional

from extraction_schema import ProfileExtraction
from text_normalizer import (
    clean_description,
    clean_location,
    clean_reference,
    find_address_block,
    has_digit,
    labelled_address,
    normalize_address,
)

# Configure logging
logger = logging.getLogger(__name__)


def _clean_identifier(value: str) -> Optional[str]:
    reference = clean_reference(value)
    if reference and len(reference) >= 3 and has_digit(reference):
        return reference
    return None


# Per-field normalization of the captured value
FIELD_NORMALIZERS: Dict[str, Callable[[str], Optional[str]]] = {
    "work_order_number": _clean_identifier,
    "po_number": _clean_identifier,
    "site_location": clean_location,
    "site_address": normalize_address,
    "problem_description": clean_description,
}


class PatternMap:
    """
    One regex per field; the first capture group is the raw value.

    Patterns are compiled when the map is built, so a pattern without a capture
    group, or for an unknown field, fails at registration rather than during
    extraction.
    """

    def __init__(
        self,
        fields: Dict[str, str],
        skip_po_number: bool = False,
        prefer_address_block: bool = True,
    ):
        """
        Initialize the pattern map.

        Args:
            fields: Mapping of field name to regex
            skip_po_number: Suppress generic PO-number detection for this profile
            prefer_address_block: Try street + city/state/zip reconstruction
                before the mapped address pattern

        Raises:
            ValueError: For an unknown field or a pattern without a capture group
        """
        self.patterns: Dict[str, re.Pattern] = {}
        for field_name, pattern in fields.items():
            if field_name not in FIELD_NORMALIZERS:
                raise ValueError(f"Unknown pattern-map field: {field_name}")
            compiled = re.compile(pattern, re.IGNORECASE | re.MULTILINE)
            if compiled.groups < 1:
                raise ValueError(f"Pattern for '{field_name}' has no capture group: {pattern}")
            self.patterns[field_name] = compiled
        self.skip_po_number = skip_po_number
        self.prefer_address_block = prefer_address_block

    def extract_field(self, text: str, field_name: str) -> Optional[str]:
        """Return the normalized value of one field, or None when it is absent."""
        pattern = self.patterns.get(field_name)
        if pattern is None:
            return None
        match = pattern.search(text)
        if not match or not match.group(1):
            logger.debug(f"[EXTRACT] {field_name}: no match")
            return None
        return FIELD_NORMALIZERS[field_name](match.group(1))

    def extract_site_address(self, text: str) -> Optional[str]:
        """Mapped address, joined with a city/state/zip line directly beneath it."""
        pattern = self.patterns.get("site_address")
        return labelled_address(text, pattern) if pattern else None

    def extract(self, text: str) -> ProfileExtraction:
        """
        Apply every field pattern to the text.

        Args:
            text: Document text

        Returns:
            ProfileExtraction with a None for each field that did not match
        """
        text = text or ""
        site_address = find_address_block(text) if self.prefer_address_block else None
        return ProfileExtraction(
            work_order_number=self.extract_field(text, "work_order_number"),
            site_location=self.extract_field(text, "site_location"),
            site_address=site_address or self.extract_site_address(text),
            problem_description=self.extract_field(text, "problem_description"),
            po_number=self.extract_field(text, "po_number"),
            skip_po_number=self.skip_po_number,
        )


def label_value(labels: str) -> str:
    """
    Regex for a "Label: value" or "Label # value" line.

    Args:
        labels: Regex alternation of label spellings

    Returns:
        Pattern capturing the rest of the line after the label
    """
    return r"^\s*(?:" + labels + r")\s*[:#]\s*(.+)$"
