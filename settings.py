"""
Extraction Settings

Holds every tunable of the work-order extraction pipeline. Defaults live on the
dataclass; an optional YAML file (``config/extraction.yaml`` next to this module,
or an explicit path) overrides them.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "extraction.yaml"

DEFAULT_BILLING_ADDRESSES = {
    "clear_vision": "1525 Rancho Conejo Blvd. STE #207, Newbury Park, CA 91320",
    "truesource": "263 Jenckes Hill Rd. Lincoln, RI 02865",
    "clm": "2655 Erie St. River Grove, IL 60171",
    "kfm247": "15947 Frederick Road, Woodbine, MD 21797",
    "first_time_fix": "334 Kevyn Ln, Bensenville IL 60106",
}


@dataclass
class ExtractionSettings:
    """Tunables for text acquisition, OCR and field extraction."""
    # Digital text shorter than this triggers OCR
    min_digital_text_length: int = 50

    # Rasterization of page one
    raster_density: int = 200
    raster_width: int = 1700
    raster_height: int = 2200
    raster_timeout_seconds: float = 30.0
    rasterizers: List[str] = field(
        default_factory=lambda: ["pdftoppm", "graphicsmagick", "imagemagick"]
    )

    # OCR
    tesseract_lang: str = "eng"
    tesseract_config: str = "--oem 3 --psm 6"
    ocr_progress_milestones: List[int] = field(default_factory=lambda: [25, 50, 75])

    # Field extraction
    min_field_text_length: int = 10
    raw_text_limit: int = 1000
    confidence_threshold: float = 0.75

    # Billing address on file per customer profile key; profiles without one report None
    billing_addresses: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BILLING_ADDRESSES))

    # Batch processing
    max_workers: int = 4

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionSettings":
        """
        Build settings from a mapping, ignoring unknown keys.

        Args:
            data: Mapping of setting names to values

        Returns:
            ExtractionSettings instance
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown extraction setting: {key}")
                continue
            values[key] = value
        return cls(**values)


def load_settings(path: Optional[Union[str, Path]] = None) -> ExtractionSettings:
    """
    Load extraction settings from a YAML file.

    A missing file yields the defaults. An unreadable or malformed file also
    yields the defaults, with a warning.

    Args:
        path: Optional path to a YAML file (defaults to config/extraction.yaml)

    Returns:
        ExtractionSettings instance
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return ExtractionSettings()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("top level of the settings file must be a mapping")
        settings = ExtractionSettings.from_dict(data)
        logger.info(f"Loaded extraction settings from {config_path}")
        return settings
    except Exception as e:
        logger.warning(f"Failed to load settings from {config_path}: {e}. Using defaults.")
        return ExtractionSettings()
