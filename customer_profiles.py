"""
Customer Profile Registry

Known facility-management partners whose work orders get dedicated extraction
rules. A document belongs to the first profile, in registry order, with an
alias that appears anywhere in its upper-cased text. Order is therefore part of
the behaviour: a document mentioning two partners always resolves to the
earlier one.

Registry order:
    1. clear_vision    Clear Vision          custom extractor
    2. truesource      True Source           custom extractor (no PO numbers)
    3. clm             CLM / OfficeTrax      pattern map
    4. kfm247          KFM247                pattern map
    5. first_time_fix  1st Time Fixed LLC    pattern map
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

from clearvision_extractor import ClearVisionExtractor
from extraction_schema import ProfileExtraction
from pattern_map_extractor import PatternMap, label_value
from settings import load_settings
from truesource_extractor import TrueSourceExtractor

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomExtractor:
    """Strategy backed by profile-specific extraction code."""
    extractor: Callable[[str], ProfileExtraction]


ExtractionStrategy = Union[CustomExtractor, PatternMap]


@dataclass(frozen=True)
class CustomerProfile:
    """A known document-issuing partner."""
    key: str
    display_name: str
    aliases: Tuple[str, ...]
    strategy: ExtractionStrategy
    billing_address: Optional[str] = None

    def matches(self, upper_text: str) -> bool:
        """True when any alias occurs in the (already upper-cased) text."""
        return any(alias in upper_text for alias in self.aliases)

    def extract(self, text: str) -> ProfileExtraction:
        """Run this profile's extraction strategy."""
        return run_strategy(self.strategy, text)


def run_strategy(strategy: ExtractionStrategy, text: str) -> ProfileExtraction:
    """
    Dispatch extraction to a profile strategy.

    Args:
        strategy: CustomExtractor or PatternMap
        text: Document text

    Returns:
        ProfileExtraction from the strategy

    Raises:
        TypeError: For an unsupported strategy type
    """
    if isinstance(strategy, CustomExtractor):
        return strategy.extractor(text)
    if isinstance(strategy, PatternMap):
        return strategy.extract(text)
    raise TypeError(f"Unsupported extraction strategy: {type(strategy).__name__}")


# Label spellings shared by the pattern-map partners' PDF work orders
WORK_ORDER_LABELS = r"work\s*order\s*(?:number|no\.?)?|wo"
CLIENT_PO_LABELS = r"client\s*po|po\s*number|po"
SERVICE_LOCATION_LABELS = r"service\s*location|site\s*address|address"
DESCRIPTION_LABELS = r"service\s*description|description|scope\s*of\s*work|problem"


def _pattern_map(site_location_labels: str) -> PatternMap:
    return PatternMap({
        "work_order_number": label_value(WORK_ORDER_LABELS),
        "po_number": label_value(CLIENT_PO_LABELS),
        "site_location": label_value(site_location_labels),
        "site_address": label_value(SERVICE_LOCATION_LABELS),
        "problem_description": label_value(DESCRIPTION_LABELS),
    })


def build_registry(billing_addresses: Optional[Dict[str, str]] = None) -> Tuple[CustomerProfile, ...]:
    """
    Build the ordered profile registry.

    Args:
        billing_addresses: Billing address per profile key

    Returns:
        Profiles in matching order

    Raises:
        ValueError: If a pattern-map profile is misconfigured
    """
    billing_addresses = billing_addresses or {}
    profiles = [
        ("clear_vision", "Clear Vision", ("CLEAR VISION", "CLEARVISION"),
         CustomExtractor(ClearVisionExtractor().extract)),
        ("truesource", "True Source", ("TRUESOURCE", "TRUE SOURCE"),
         CustomExtractor(TrueSourceExtractor().extract)),
        ("clm", "CLM", ("OFFICETRAX", "CLM MIDWEST", "CLM FACILITY"),
         _pattern_map(r"client\s*name|site\s*name|store\s*(?:name|number)")),
        ("kfm247", "KFM247", ("KFM247", "KFM 247"),
         _pattern_map(r"site\s*name|location\s*name|client\s*name")),
        ("first_time_fix", "1st Time Fixed LLC", ("1ST TIME FIX", "1STTIMEFIX", "FIRST TIME FIX"),
         _pattern_map(r"client\s*name|site\s*name|customer")),
    ]
    return tuple(
        CustomerProfile(
            key=key,
            display_name=display_name,
            aliases=aliases,
            strategy=strategy,
            billing_address=billing_addresses.get(key),
        )
        for key, display_name, aliases, strategy in profiles
    )


PROFILE_REGISTRY: Tuple[CustomerProfile, ...] = build_registry(load_settings().billing_addresses)


def match_profile(
    text: Optional[str],
    registry: Optional[Tuple[CustomerProfile, ...]] = None,
) -> Optional[CustomerProfile]:
    """
    Return the first profile in registry order whose alias occurs in the text.

    Args:
        text: Document text
        registry: Profiles to search (defaults to PROFILE_REGISTRY)

    Returns:
        Matching CustomerProfile or None
    """
    registry = PROFILE_REGISTRY if registry is None else registry
    upper_text = (text or "").upper()
    for profile in registry:
        if profile.matches(upper_text):
            logger.info(f"[EXTRACT] Detected customer profile: {profile.display_name}")
            return profile
    logger.info("[EXTRACT] No customer profile matched, using generic extraction")
    return None


def detect_profile(
    text: Optional[str],
    registry: Optional[Tuple[CustomerProfile, ...]] = None,
) -> Optional[str]:
    """Key of the first matching profile, or None."""
    profile = match_profile(text, registry)
    return profile.key if profile else None


def get_profile(key: str, registry: Optional[Tuple[CustomerProfile, ...]] = None) -> Optional[CustomerProfile]:
    """Look up a profile by key."""
    registry = PROFILE_REGISTRY if registry is None else registry
    for profile in registry:
        if profile.key == key:
            return profile
    return None
