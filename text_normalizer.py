"""
Text Normalization Utilities

Pure string helpers that turn ragged digital or OCR text into presentable field
values: whitespace collapsing, title-casing, noise-label stripping, length
clamping and US street-address reconstruction.
"""

import re
from typing import List, Optional, Tuple

STREET_SUFFIX = (
    r"(?:st|street|ave|avenue|rd|road|dr|drive|blvd|boulevard|ln|lane|way|ct|court|"
    r"pl|place|pkwy|parkway|hwy|highway|cir|circle|ter|terrace|trl|trail|sq|square)"
)

# Words kept upper-case when title-casing
UPPERCASE_TOKENS = {
    "NE", "NW", "SE", "SW", "LLC", "LLP", "USA", "PO", "ATM", "HVAC", "CVS", "DC",
}

# Labels that OCR frequently leaves glued to the front of a captured value
NOISE_LABELS = [
    r"name", r"location", r"site", r"store", r"address", r"attn", r"attention",
    r"ship\s*to", r"bill\s*to", r"sold\s*to", r"customer", r"client",
]

_NOISE_LABEL_RE = re.compile(
    r"^(?:(?:" + "|".join(NOISE_LABELS) + r")\s*[:\-]\s*)+", re.IGNORECASE
)
_EDGE_PUNCTUATION = " \t:;,|-_"

CITY_STATE_ZIP_RE = re.compile(
    r"^([a-z][a-z .'\-]*?)[,\s]+([a-z]{2})\.?[,\s]+(\d{5}(?:-\d{4})?)$", re.IGNORECASE
)
STREET_LINE_RE = re.compile(r"^\d{1,6}[a-z]?\s+[a-z0-9]", re.IGNORECASE)
STREET_WITH_SUFFIX_RE = re.compile(
    r"^\d{1,6}[a-z]?\s+.*\b" + STREET_SUFFIX + r"\b", re.IGNORECASE
)


def collapse_whitespace(value: str) -> str:
    """Collapse runs of whitespace (including newlines) into single spaces."""
    return re.sub(r"\s+", " ", value or "").strip()


def _capitalize_word(word: str) -> str:
    if word.upper() in UPPERCASE_TOKENS:
        return word.upper()
    # Capitalize each hyphen-separated piece; leave digits alone ("3rd" stays "3rd")
    return "-".join(piece[:1].upper() + piece[1:].lower() for piece in word.split("-"))


def title_case(value: str) -> str:
    """
    Title-case a value word by word.

    Unlike ``str.title`` this keeps ordinals ("3rd"), store numbers ("#122")
    and a small set of abbreviations ("NW", "LLC") intact.
    """
    return " ".join(_capitalize_word(word) for word in collapse_whitespace(value).split(" "))


def sentence_case(value: str) -> str:
    """Upper-case the first letter of a value, leaving the rest untouched."""
    value = collapse_whitespace(value)
    for index, char in enumerate(value):
        if char.isalpha():
            return value[:index] + char.upper() + value[index + 1:]
    return value


def strip_noise_labels(value: str) -> str:
    """
    Remove leading form labels ("Site:", "Ship To -") and stray edge punctuation.

    Everything after a pipe is dropped as well, since multi-column layouts
    frequently bleed a neighbouring column into the capture.
    """
    value = re.sub(r"\|.*$", "", value or "")
    value = _NOISE_LABEL_RE.sub("", value.strip())
    return value.strip(_EDGE_PUNCTUATION)


def clamp(value: str, max_length: int) -> str:
    """Clamp a value to ``max_length`` characters without trailing whitespace."""
    if value is None:
        return ""
    if len(value) <= max_length:
        return value
    return value[:max_length].rstrip()


def clean_value(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """
    Return a trimmed, whitespace-collapsed value or None when nothing is left.

    Args:
        value: Raw value
        max_length: Optional length clamp

    Returns:
        Cleaned value, or None for missing/blank input
    """
    if value is None:
        return None
    cleaned = collapse_whitespace(str(value))
    if max_length is not None:
        cleaned = clamp(cleaned, max_length)
    return cleaned or None


def has_digit(value: Optional[str]) -> bool:
    """True when the value contains at least one digit."""
    return bool(value) and bool(re.search(r"\d", value))


def is_street_line(line: str, require_suffix: bool = False) -> bool:
    """True when a line looks like the street part of an address."""
    line = collapse_whitespace(line)
    if require_suffix:
        return bool(STREET_WITH_SUFFIX_RE.match(line))
    return bool(STREET_LINE_RE.match(line))


def parse_city_state_zip(line: str) -> Optional[Tuple[str, str, str]]:
    """
    Split a "City ST 12345" line into its parts.

    Args:
        line: Candidate city/state/zip line

    Returns:
        Tuple of (city, state, zip) or None when the line does not match
    """
    match = CITY_STATE_ZIP_RE.match(collapse_whitespace(line))
    if not match:
        return None
    city, state, zip_code = match.groups()
    return title_case(city.strip(" ,")), state.upper(), zip_code


def format_address(street: str, city_line: Optional[str] = None) -> Optional[str]:
    """
    Build a "Street, City, ST ZIP" address from its street and city lines.

    Args:
        street: Street line(s), already joined
        city_line: Optional "City ST ZIP" line

    Returns:
        Formatted address or None when the street is empty
    """
    street = title_case(strip_noise_labels(street).rstrip(".,"))
    if not street:
        return None
    if city_line:
        parts = parse_city_state_zip(city_line)
        if parts:
            city, state, zip_code = parts
            return f"{street}, {city}, {state} {zip_code}"
        city_line = title_case(city_line.strip(" ,"))
        if city_line:
            return f"{street}, {city_line}"
    return street


def non_empty_lines(text: str) -> List[str]:
    """Return the stripped, non-empty lines of a block of text."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def find_address_block(text: str, require_suffix: bool = True) -> Optional[str]:
    """
    Find a street line directly followed by a city/state/zip line.

    Args:
        text: Text to scan
        require_suffix: Require a street suffix (St, Ave, ...) on the street line

    Returns:
        Formatted address or None
    """
    lines = non_empty_lines(text)
    for street, city_line in zip(lines, lines[1:]):
        if is_street_line(street, require_suffix=require_suffix) and parse_city_state_zip(city_line):
            return format_address(street, city_line)
    return None


def section_lines(
    text: str,
    header: str,
    stop: Optional[re.Pattern] = None,
    max_lines: int = 6,
) -> List[str]:
    """
    Return the lines under a section header, up to the next header.

    Args:
        text: Document text
        header: Regex for the header line (matched against the whole line)
        stop: Compiled regex matching lines that start the next section
        max_lines: Maximum number of lines to collect

    Returns:
        Stripped, non-empty lines of the section (empty when the header is absent)
    """
    header_re = re.compile(r"^\s*(?:" + header + r")\s*[:#]?\s*$", re.IGNORECASE)
    lines = (text or "").splitlines()
    for index, line in enumerate(lines):
        if not header_re.match(line):
            continue
        block = []
        for following in lines[index + 1:]:
            following = following.strip()
            if not following:
                continue
            if stop is not None and stop.match(following):
                break
            block.append(following)
            if len(block) >= max_lines:
                break
        return block
    return []


def clean_reference(value: Optional[str]) -> Optional[str]:
    """Normalize a work-order or PO reference: first token, no leading '#', upper-case."""
    value = collapse_whitespace(value or "").lstrip("#: ")
    if not value:
        return None
    token = value.split(" ")[0].strip(".,;:#")
    return token.upper() or None


def clean_location(value: Optional[str], max_length: int = 80) -> Optional[str]:
    """Normalize a customer or site name: labels stripped, title-cased, clamped."""
    value = strip_noise_labels(collapse_whitespace(value or ""))
    if not value:
        return None
    return clamp(title_case(value), max_length) or None


# Stray references that bleed into free-text captures
_STRAY_WORK_ORDER_RE = re.compile(
    r"\b(?:wo|work\s*order)\s*(?:number|no\.?)?\s*[#:]?\s*#?[a-z0-9-]*\d[a-z0-9-]*", re.IGNORECASE
)
_STRAY_HASH_NUMBER_RE = re.compile(r"#\s*\d{5,}")
_STRAY_DATE_RE = re.compile(
    r"\b(?:\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{2}-\d{2})(?:\s+\d{1,2}:\d{2}(?:\s*[ap]m)?)?", re.IGNORECASE
)


def clean_description(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    Normalize a problem description.

    Work-order numbers and dates that OCR merged into the capture are removed,
    then the text is collapsed, sentence-cased and clamped.
    """
    value = re.sub(r"\|.*$", "", value or "", flags=re.MULTILINE)
    value = _STRAY_WORK_ORDER_RE.sub(" ", value)
    value = _STRAY_HASH_NUMBER_RE.sub(" ", value)
    value = _STRAY_DATE_RE.sub(" ", value)
    value = collapse_whitespace(value).strip(_EDGE_PUNCTUATION + ".")
    if not value:
        return None
    return clamp(sentence_case(value), max_length) or None


def normalize_address(value: Optional[str]) -> Optional[str]:
    """Title-case a single-line address, keeping the state abbreviation upper-case."""
    value = strip_noise_labels(collapse_whitespace(value or "")).rstrip(".,")
    if not value:
        return None
    value = title_case(value)
    value = re.sub(
        r"\b([A-Za-z]{2})(\.?,?\s+\d{5}(?:-\d{4})?)$", lambda m: m.group(1).upper() + m.group(2), value
    )
    return re.sub(r",\s*([A-Za-z]{2})$", lambda m: ", " + m.group(1).upper(), value)


def labelled_address(text: str, pattern: re.Pattern) -> Optional[str]:
    """
    Address captured by a label pattern, joined with a city/state/zip line
    directly beneath it when the capture holds only the street.

    Args:
        text: Document text
        pattern: Compiled regex whose first group captures the street

    Returns:
        Formatted address or None when the label is absent
    """
    match = pattern.search(text or "")
    if not match or not match.group(1):
        return None
    street = match.group(1).strip()
    following = non_empty_lines(text[match.end():])
    if following and not parse_city_state_zip(street) and parse_city_state_zip(following[0]):
        return format_address(street, following[0])
    return normalize_address(street)
