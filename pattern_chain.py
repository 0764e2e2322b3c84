"""
Ordered Pattern Chains

Every field extractor in this project is an ordered list of attempts where the
first attempt that matches *and* yields an acceptable value wins; later
attempts are never evaluated. This module holds that combinator so the
supplier, PO-number and per-profile extractors all share one implementation.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from text_normalizer import collapse_whitespace, has_digit

# Configure logging
logger = logging.getLogger(__name__)

Matcher = Union[str, re.Pattern, Callable[[str], Optional[str]]]
Validator = Callable[[str], bool]
Transform = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class ChainMatch:
    """The accepted value of a chain together with the attempt that produced it."""
    value: str
    label: str
    index: int


class ChainStep:
    """
    One attempt in a fallback chain.

    ``matcher`` is either a regular expression (its first capture group is the
    raw value) or a callable returning the raw value or None. ``transform``
    cleans the raw value; ``validator`` then accepts or rejects it.
    """

    def __init__(
        self,
        matcher: Matcher,
        label: str,
        validator: Optional[Validator] = None,
        transform: Optional[Transform] = None,
        flags: int = re.IGNORECASE,
    ):
        if isinstance(matcher, str):
            matcher = re.compile(matcher, flags)
        if isinstance(matcher, re.Pattern) and matcher.groups < 1:
            raise ValueError(f"Pattern for '{label}' has no capture group: {matcher.pattern}")
        self.matcher = matcher
        self.label = label
        self.validator = validator
        self.transform = transform

    def find(self, text: str) -> Optional[str]:
        """Return the raw value this step captures from ``text``, if any."""
        if isinstance(self.matcher, re.Pattern):
            match = self.matcher.search(text)
            if not match or match.group(1) is None:
                return None
            return match.group(1)
        return self.matcher(text)

    def evaluate(self, text: str) -> Optional[str]:
        """Return the transformed value when it passes validation, else None."""
        raw = self.find(text)
        if raw is None:
            return None
        value = self.transform(raw) if self.transform else raw.strip()
        if not value:
            return None
        if self.validator and not self.validator(value):
            return None
        return value

    def __repr__(self) -> str:
        return f"ChainStep({self.label!r})"


def first_accepted(text: str, steps: Sequence[ChainStep], field_name: str = "") -> Optional[ChainMatch]:
    """
    Evaluate steps in order and return the first accepted value.

    Args:
        text: Text to search
        steps: Ordered chain, most specific attempt first
        field_name: Name used in log messages

    Returns:
        ChainMatch for the first accepted step, or None when every step misses
    """
    if not text:
        return None
    for index, step in enumerate(steps):
        value = step.evaluate(text)
        if value is not None:
            logger.debug(f"[EXTRACT] {field_name or 'field'} matched via '{step.label}': {value!r}")
            return ChainMatch(value=value, label=step.label, index=index)
    logger.debug(f"[EXTRACT] {field_name or 'field'}: no pattern accepted")
    return None


def first_value(text: str, steps: Sequence[ChainStep], field_name: str = "") -> Optional[str]:
    """Shorthand for ``first_accepted(...).value`` that returns None on a miss."""
    match = first_accepted(text, steps, field_name)
    return match.value if match else None


# Common validators

def min_length(length: int) -> Validator:
    """Validator accepting values at least ``length`` characters long."""
    return lambda value: len(value) >= length


def length_between(low: int, high: int) -> Validator:
    """Validator accepting values whose length lies in [low, high]."""
    return lambda value: low <= len(value) <= high


def identifier(min_chars: int = 3, stop_words: Sequence[str] = ()) -> Validator:
    """Validator for reference numbers: contains a digit, long enough, not a stop word."""
    stops = {word.lower() for word in stop_words}
    return lambda value: (
        len(value) >= min_chars and has_digit(value) and value.lower() not in stops
    )


def all_of(*validators: Validator) -> Validator:
    """Combine validators; every one must accept."""
    return lambda value: all(validator(value) for validator in validators)


def steps_from(patterns: List[tuple], **kwargs) -> List[ChainStep]:
    """Build a chain from (pattern, label) pairs sharing validator/transform."""
    return [ChainStep(pattern, label, **kwargs) for pattern, label in patterns]


def squash(value: str) -> str:
    """Default transform: collapse whitespace."""
    return collapse_whitespace(value)
