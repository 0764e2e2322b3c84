#!/usr/bin/env python3
"""
Vendor Detection Module

Identifies the supplier that issued a purchase-order PDF from its text.
Two strategies are tried in order:

1. Layout: find a "Vendor" label at the start of a line and read the token on
   the same line, or on the next non-empty line. The token is classified
   against the known vendors; an unrecognized token is still returned
   (cleaned), since the document does name a vendor. Tokens that are another
   label or contract wording are rejected and the keyword strategy decides.
2. Keywords: per-vendor regex alternatives, tolerant of common OCR confusions
   (0/o, 1/l, 5/s), searched across the whole document.
"""

import re
import logging
from typing import Dict, Any, List, Optional
from enum import Enum

from pattern_chain import ChainStep, first_accepted
from text_normalizer import collapse_whitespace, non_empty_lines, strip_noise_labels, title_case

# Configure logging
logger = logging.getLogger(__name__)


class VendorType(Enum):
    """Known suppliers, valued by display name."""
    CHICAGO_TEMPERED = "Chicago Tempered"
    CRL = "CRL"
    OLDCASTLE = "Oldcastle"
    CASCO = "Casco"


# Tokens that follow a "Vendor" label but are not a vendor name
LABEL_STOPWORDS = {
    "no", "number", "num", "id", "code", "name", "info", "information", "address",
    "ship to", "bill to", "sold to", "date", "phone", "fax", "contact", "terms",
}

_VENDOR_LABEL_RE = re.compile(
    r"^[ \t]*vendor(?:[ \t]*name)?[ \t]*(?:[:#]+|$)[ \t]*([^\n]*)", re.IGNORECASE | re.MULTILINE
)
_VENDOR_NUMBER_RE = re.compile(r"^(?:no\b\.?|number\b|num\b|id\b|code\b|#)", re.IGNORECASE)

# Another label or a clause of contract wording, not a vendor name
_NON_NAME_LEAD_RE = re.compile(
    r"^(?:p\.?\s?o\b\.?|ship|bill|sold|terms|invoice|remit|date|phone|fax|email|"
    r"shall|will|must|may|agrees?|is|are|to|of|and|the)\b",
    re.IGNORECASE,
)
MAX_VENDOR_WORDS = 6

# Undo common OCR digit-for-letter swaps before substring classification
_OCR_DECONFUSE = str.maketrans("0158", "olsb")


class VendorDetector:
    """
    Detects the supplier named in purchase-order text.
    """

    def __init__(self):
        """Initialize the vendor detector with patterns."""
        # Ordered: the first vendor with any matching pattern wins
        self.vendor_patterns = {
            VendorType.CHICAGO_TEMPERED: {
                'layout_markers': ['chicagotemp', 'chicagotempered'],
                'keyword_patterns': [
                    r'chicag[o0]\s*temp',
                    r'\bctg\b',
                    r'chicag[o0][\s\S]*tempered\s+glass',
                    r'chicag[o0][\s\S]*glass[\s\S]*temper',
                ],
            },
            VendorType.CRL: {
                'layout_markers': ['laurence', 'crlaurence'],
                'keyword_patterns': [
                    r'c\.?\s?r\.?\s?laur[e3]nce',
                    r'\bcrl\b',
                    r'crl\.c[o0]m',
                ],
            },
            VendorType.OLDCASTLE: {
                'layout_markers': ['oldcastle', 'oldcastl', 'obeglass'],
                'keyword_patterns': [
                    r'[o0][l1]d\s*ca[s5]t[l1i]e',
                    r'\b[o0]be\s+glass',
                    r'[o0][l1]d\s*ca[s5]t[l1]e\s*be\b',
                ],
            },
            VendorType.CASCO: {
                'layout_markers': ['casco'],
                'keyword_patterns': [
                    r'ca[s5]c[o0]\s+(?:industries|glass)',
                    r'\bca[s5]c[o0]\b',
                ],
            },
        }
        self._compiled = {
            vendor_type: [re.compile(p, re.IGNORECASE) for p in patterns['keyword_patterns']]
            for vendor_type, patterns in self.vendor_patterns.items()
        }
        self.strategies = [
            ChainStep(self.detect_from_layout, "layout"),
            ChainStep(self.detect_from_keywords, "keyword"),
        ]

    def classify_vendor_token(self, token: str) -> Optional[VendorType]:
        """
        Classify a captured vendor token against the known vendors.

        Args:
            token: Text captured after a "Vendor" label

        Returns:
            Matching VendorType or None
        """
        compact = re.sub(r'[^a-z0-9]', '', token.lower())
        if not compact:
            return None
        deconfused = compact.translate(_OCR_DECONFUSE)

        for vendor_type, patterns in self.vendor_patterns.items():
            if any(marker in deconfused for marker in patterns['layout_markers']):
                return vendor_type

        # Bare initialisms
        if compact == 'ctg':
            return VendorType.CHICAGO_TEMPERED
        if compact.startswith('crl'):
            return VendorType.CRL
        return None

    def _clean_vendor_token(self, raw: str) -> Optional[str]:
        # Keep only the first column of multi-column layouts
        token = re.split(r'\s{2,}|\t', raw.strip())[0]
        token = strip_noise_labels(token)
        token = collapse_whitespace(token).strip(' .,:;#')[:60].rstrip()
        if not token:
            return None
        if token.lower() in LABEL_STOPWORDS or _VENDOR_NUMBER_RE.match(token):
            return None
        if _NON_NAME_LEAD_RE.match(token) or len(token.split()) > MAX_VENDOR_WORDS:
            return None
        if len(re.findall(r'[a-z]', token, re.IGNORECASE)) < 2:
            return None
        return token

    def detect_from_layout(self, text: str) -> Optional[str]:
        """
        Read the vendor named after a "Vendor" label.

        Args:
            text: Document text

        Returns:
            Known vendor name, the cleaned raw token, or None
        """
        for match in _VENDOR_LABEL_RE.finditer(text):
            token = self._clean_vendor_token(match.group(1))
            if token is None:
                following = non_empty_lines(text[match.end():])
                if following and not _VENDOR_LABEL_RE.match(following[0]):
                    token = self._clean_vendor_token(following[0])
            if token is None:
                continue

            vendor_type = self.classify_vendor_token(token)
            if vendor_type is not None:
                logger.info(f"[ANALYSIS] Vendor label match: {vendor_type.value} (token: {token!r})")
                return vendor_type.value

            logger.info(f"[ANALYSIS] Vendor label names an unknown vendor: {token!r}")
            return title_case(token)
        return None

    def detect_from_keywords(self, text: str) -> Optional[str]:
        """
        Search the whole document for per-vendor keyword patterns.

        Args:
            text: Document text

        Returns:
            Known vendor name or None
        """
        for vendor_type, patterns in self._compiled.items():
            for pattern in patterns:
                if pattern.search(text):
                    logger.info(f"[ANALYSIS] Keyword match for {vendor_type.value}: {pattern.pattern}")
                    return vendor_type.value
        return None

    def detect_vendor(self, text: str) -> Dict[str, Any]:
        """
        Detect the supplier, reporting which strategy found it.

        Args:
            text: Document text

        Returns:
            Detection result dictionary
        """
        match = first_accepted(text or "", self.strategies, "supplier")
        known = {vendor_type.value for vendor_type in VendorType}
        result = {
            'vendor_name': match.value if match else None,
            'known_vendor': bool(match and match.value in known),
            'detection_method': match.label if match else "unknown",
        }
        logger.info(f"[ANALYSIS] Detected supplier: {result['vendor_name'] or '(none)'} "
                    f"(method: {result['detection_method']})")
        return result

    def identify_supplier(self, text: str) -> Optional[str]:
        """Return the supplier named in the text, or None."""
        return self.detect_vendor(text)['vendor_name']


def identify_supplier(text: str) -> Optional[str]:
    """
    Convenience function for supplier identification.

    Args:
        text: Document text

    Returns:
        Supplier name or None
    """
    detector = VendorDetector()
    return detector.identify_supplier(text)


def known_vendor_names() -> List[str]:
    """Display names of every known vendor, in detection order."""
    return [vendor_type.value for vendor_type in VendorType]
