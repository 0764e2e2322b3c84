"""
Extraction Output Schema

Plain data records produced by the work-order pipeline. Attribute names are
snake_case; ``to_dict`` emits the camelCase keys the CRM consumes.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True)
class ExtractionResult:
    """Result of analyzing one document: its text, supplier and PO number."""
    text: str
    supplier: Optional[str] = None
    po_number: Optional[str] = None

    @property
    def text_length(self) -> int:
        return len(self.text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the CRM dictionary shape."""
        return {
            "text": self.text,
            "supplier": self.supplier,
            "poNumber": self.po_number,
            "textLength": self.text_length,
        }


@dataclass(frozen=True)
class ProfileExtraction:
    """
    Fields pulled out by a per-profile or generic extractor.

    ``skip_po_number`` is an internal flag: when set, the pipeline does not fall
    back to generic PO-number detection. It never reaches WorkOrderFields.
    """
    work_order_number: Optional[str] = None
    site_location: Optional[str] = None
    site_address: Optional[str] = None
    problem_description: Optional[str] = None
    po_number: Optional[str] = None
    customer: Optional[str] = None
    skip_po_number: bool = False


@dataclass(frozen=True)
class WorkOrderFields:
    """Structured work-order record handed to the CRM."""
    customer: Optional[str] = None
    billing_address: Optional[str] = None
    work_order_number: Optional[str] = None
    po_number: Optional[str] = None
    site_location: Optional[str] = None
    site_address: Optional[str] = None
    problem_description: Optional[str] = None
    detected_customer_profile: bool = False
    raw_text: str = ""

    @classmethod
    def empty(cls, raw_text: str = "") -> "WorkOrderFields":
        """Record with every field missing."""
        return cls(raw_text=raw_text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the CRM dictionary shape (camelCase keys)."""
        return {_camel_case(key): value for key, value in asdict(self).items()}
