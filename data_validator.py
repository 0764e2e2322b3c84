"""
Data Validation Module

Scores how complete an extracted work order is, so the caller can decide
whether a record can be created as-is or needs manual review.
"""

import logging
from typing import List
from dataclasses import dataclass

from extraction_schema import WorkOrderFields

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of field completeness scoring."""
    confidence: float
    is_confident: bool
    missing_fields: List[str]
    has_identifier: bool


class DataValidator:
    """
    Completeness scorer for extracted work orders.

    Three strong fields each count one point; a fourth point is given when the
    record carries any identifier (work-order or PO number).
    """

    STRONG_FIELDS = ['customer', 'site_address', 'problem_description']
    IDENTIFIER_FIELDS = ['work_order_number', 'po_number']

    def __init__(self, confidence_threshold: float = 0.75):
        """
        Initialize the data validator.

        Args:
            confidence_threshold: Minimum score for a record to count as confident
        """
        self.confidence_threshold = confidence_threshold

    def validate_fields(self, fields: WorkOrderFields) -> ValidationResult:
        """
        Score a work-order record.

        Args:
            fields: Extracted work-order fields

        Returns:
            ValidationResult with the confidence score and missing strong fields
        """
        missing_fields = [name for name in self.STRONG_FIELDS if not getattr(fields, name)]
        has_identifier = any(getattr(fields, name) for name in self.IDENTIFIER_FIELDS)

        have = len(self.STRONG_FIELDS) - len(missing_fields) + (1 if has_identifier else 0)
        confidence = have / (len(self.STRONG_FIELDS) + 1)

        if not has_identifier:
            missing_fields.append('work_order_number|po_number')

        result = ValidationResult(
            confidence=confidence,
            is_confident=confidence >= self.confidence_threshold,
            missing_fields=missing_fields,
            has_identifier=has_identifier,
        )
        logger.info(f"[EXTRACT] Field confidence: {confidence:.2f} "
                    f"({'confident' if result.is_confident else 'needs review'})")
        return result


def score_fields(fields: WorkOrderFields, confidence_threshold: float = 0.75) -> ValidationResult:
    """Convenience function for scoring a work-order record."""
    return DataValidator(confidence_threshold).validate_fields(fields)
