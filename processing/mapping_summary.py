"""
Mapping summary — condenses a detected column mapping for operator review.

Reports how many fields were mapped, which required fields are missing, and
which fuzzy matches are weak enough that a person should confirm them. The
summary is advisory: it never blocks an import, callers decide what to do
with required_missing > 0.

Public API:
    get_mapping_summary(mapping) → MappingSummary
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from config.mapping_config import LOW_CONFIDENCE_THRESHOLD
from processing.column_detector import MatchResult, validate_threshold

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class LowConfidenceMatch:
    """A fuzzy match that should be confirmed by an operator."""

    field: str
    csv_column: str
    confidence: float


@dataclass
class MappingSummary:
    """Aggregate view of a field mapping."""

    total_fields: int = 0
    mapped_fields: int = 0
    required_mapped: int = 0
    required_missing: int = 0
    low_confidence: list[LowConfidenceMatch] = field(default_factory=list)
    mappings: dict[str, dict[str, Any]] = field(default_factory=dict)
    """field → {"csv_column", "confidence", "exact_match"} for mapped fields."""

    missing_required_fields: list[str] = field(default_factory=list)

    @property
    def can_import(self) -> bool:
        """True when every required field has a column."""
        return self.required_missing == 0

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for the review UI."""
        data = asdict(self)
        data["can_import"] = self.can_import
        return data


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def get_mapping_summary(
    mapping: Mapping[str, MatchResult],
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> MappingSummary:
    """
    Summarize a field mapping.

    Args:
        mapping: Field name → MatchResult, as returned by detect_columns().
        low_confidence_threshold: Fuzzy matches scoring below this are listed
                                  in low_confidence. Exact matches never are.

    Returns:
        MappingSummary with counts in mapping order.

    Raises:
        InvalidInputError: If low_confidence_threshold is not a number in [0, 1].
    """
    validate_threshold(low_confidence_threshold)

    summary = MappingSummary()

    for field_name, result in mapping.items():
        summary.total_fields += 1

        if not result.is_mapped:
            if result.required:
                summary.required_missing += 1
                summary.missing_required_fields.append(field_name)
            continue

        summary.mapped_fields += 1
        summary.mappings[field_name] = {
            "csv_column": result.header,
            "confidence": result.confidence,
            "exact_match": result.exact_match,
        }

        if result.required:
            summary.required_mapped += 1

        if not result.exact_match and result.confidence < low_confidence_threshold:
            summary.low_confidence.append(LowConfidenceMatch(
                field=field_name,
                csv_column=result.header,
                confidence=result.confidence,
            ))

    if summary.required_missing:
        logger.warning(
            f"Required fields without a column: "
            f"{', '.join(summary.missing_required_fields)}"
        )

    logger.info(
        f"Mapping summary: {summary.mapped_fields}/{summary.total_fields} mapped, "
        f"{summary.required_missing} required missing, "
        f"{len(summary.low_confidence)} low confidence"
    )

    return summary
