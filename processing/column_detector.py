"""
Column detector — works out which uploaded column supplies each import field.

For every field in a schema, headers are compared against the field's
aliases in two passes:
  1. Exact match: normalized header == normalized alias (confidence 1.0).
     The first header, in upload order, that equals any alias wins.
  2. Fuzzy match: only when no header matches exactly. The best
     Levenshtein similarity over every (header, alias) pair is accepted if
     it reaches the threshold (default 0.6). Earlier headers, then earlier
     aliases, win ties.

Fields are matched independently, so one header can be picked for several
fields. A field with no acceptable header is reported with header=None;
that is a normal outcome, not an error.

Public API:
    detect_column(headers, field_def) → MatchResult
    detect_columns(headers, schema) → dict[str, MatchResult]
    detect_order_columns(headers) / detect_product_columns(headers)
    detect_import_columns(headers, import_type)
    apply_column_overrides(mapping, overrides, headers)
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Mapping, Sequence

from config.field_schemas import (
    ORDER_FIELDS,
    PRODUCT_FIELDS,
    FieldDefinition,
    FieldSchema,
    get_field_schema,
    get_required_fields,
)
from config.mapping_config import EXACT_CONFIDENCE, MATCH_THRESHOLD
from utils.fuzzy_match import normalize_header, similarity_score

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Errors and data classes
# ═══════════════════════════════════════════════════════════════════════════

class InvalidInputError(ValueError):
    """Raised when a schema, threshold or override cannot be used for matching."""


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one field against the uploaded headers."""

    header: str | None = None
    """Chosen header as it appears in the upload, or None if unmatched."""

    alias: str | None = None
    """Alias that produced the match (None if unmatched or set by an operator)."""

    confidence: float = 0.0
    """1.0 for exact matches, the similarity score for fuzzy ones, else 0."""

    exact_match: bool = False
    required: bool = False

    @property
    def is_mapped(self) -> bool:
        return self.header is not None


FieldMapping = dict[str, MatchResult]


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def detect_column(
    headers: Sequence[str],
    field_def: FieldDefinition,
    threshold: float = MATCH_THRESHOLD,
) -> MatchResult:
    """
    Find the header that best matches a single field definition.

    Args:
        headers: Column headers in upload order.
        field_def: Field to match, with its aliases.
        threshold: Minimum similarity (0-1) to accept a fuzzy match.

    Returns:
        MatchResult for the field. header is None when neither an exact nor
        a sufficiently close fuzzy match exists.

    Raises:
        InvalidInputError: If threshold is not a number in [0, 1].
    """
    validate_threshold(threshold)

    aliases = [(alias, normalize_header(alias)) for alias in field_def.aliases]
    normalized_headers = [(header, normalize_header(header)) for header in headers]

    # Pass 1: exact matches beat any fuzzy score elsewhere in the row
    for header, norm_header in normalized_headers:
        for alias, norm_alias in aliases:
            if norm_header == norm_alias:
                logger.debug(
                    f"Field '{field_def.field_name}': exact match "
                    f"'{header}' (alias '{alias}')"
                )
                return MatchResult(
                    header=header,
                    alias=alias,
                    confidence=EXACT_CONFIDENCE,
                    exact_match=True,
                    required=field_def.required,
                )

    # Pass 2: best fuzzy score, first pair wins ties
    best_header: str | None = None
    best_alias: str | None = None
    best_score = 0.0

    for header, norm_header in normalized_headers:
        for alias, norm_alias in aliases:
            score = similarity_score(norm_header, norm_alias)
            if score > best_score:
                best_score = score
                best_header = header
                best_alias = alias

    if best_header is not None and best_score >= threshold:
        logger.debug(
            f"Field '{field_def.field_name}': fuzzy match '{best_header}' "
            f"(alias '{best_alias}', score={best_score:.2f})"
        )
        return MatchResult(
            header=best_header,
            alias=best_alias,
            confidence=best_score,
            exact_match=False,
            required=field_def.required,
        )

    logger.debug(
        f"Field '{field_def.field_name}': no match above threshold {threshold} "
        f"(best was '{best_header}' at {best_score:.2f})"
    )
    return MatchResult(required=field_def.required)


def detect_columns(
    headers: Sequence[str],
    schema: FieldSchema,
    threshold: float = MATCH_THRESHOLD,
) -> FieldMapping:
    """
    Match every field of a schema against the uploaded headers.

    Args:
        headers: Column headers in upload order.
        schema: Field name → FieldDefinition, in evaluation order.
        threshold: Minimum similarity (0-1) to accept a fuzzy match.

    Returns:
        Field name → MatchResult, in schema order.

    Raises:
        InvalidInputError: If the schema or threshold is unusable.
    """
    validate_schema(schema)
    validate_threshold(threshold)

    mapping: FieldMapping = {
        field_name: detect_column(headers, field_def, threshold)
        for field_name, field_def in schema.items()
    }

    mapped = sum(1 for result in mapping.values() if result.is_mapped)
    missing_required = [
        name for name in get_required_fields(schema)
        if not mapping[name].is_mapped
    ]
    logger.info(
        f"Column detection complete: {mapped}/{len(mapping)} fields mapped "
        f"from {len(headers)} headers, "
        f"{len(missing_required)} required missing"
    )

    return mapping


def detect_order_columns(
    headers: Sequence[str],
    threshold: float = MATCH_THRESHOLD,
) -> FieldMapping:
    """Detect column mappings for an order import."""
    return detect_columns(headers, ORDER_FIELDS, threshold)


def detect_product_columns(
    headers: Sequence[str],
    threshold: float = MATCH_THRESHOLD,
) -> FieldMapping:
    """Detect column mappings for a product import."""
    return detect_columns(headers, PRODUCT_FIELDS, threshold)


def detect_import_columns(
    headers: Sequence[str],
    import_type: str,
    threshold: float = MATCH_THRESHOLD,
) -> FieldMapping:
    """
    Detect column mappings for a named import type ("orders", "products").

    Raises:
        InvalidInputError: If the import type is unknown.
    """
    try:
        schema = get_field_schema(import_type)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc
    return detect_columns(headers, schema, threshold)


def apply_column_overrides(
    mapping: Mapping[str, MatchResult],
    overrides: Mapping[str, str | None],
    headers: Sequence[str],
) -> FieldMapping:
    """
    Apply an operator's manual column choices to a detected mapping.

    Args:
        mapping: The detected mapping (not modified).
        overrides: Field name → header to use, or None to leave the field
                   unmapped.
        headers: Column headers of the upload the mapping was built from.

    Returns:
        A new mapping. Overridden fields carry confidence 1.0 and
        exact_match=True; all other fields are copied as-is.

    Raises:
        InvalidInputError: If an override names an unknown field or a header
                           that is not in *headers*.
    """
    known_headers = set(headers)
    result: FieldMapping = dict(mapping)

    for field_name, header in overrides.items():
        if field_name not in mapping:
            raise InvalidInputError(
                f"Cannot override unknown field '{field_name}'"
            )
        if header is not None and header not in known_headers:
            raise InvalidInputError(
                f"Override for '{field_name}' names missing column '{header}'"
            )

        required = mapping[field_name].required
        if header is None:
            result[field_name] = MatchResult(required=required)
        else:
            result[field_name] = MatchResult(
                header=header,
                confidence=EXACT_CONFIDENCE,
                exact_match=True,
                required=required,
            )
        logger.info(f"Override applied: '{field_name}' → {header!r}")

    return result


# ═══════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════

def validate_schema(schema: FieldSchema) -> None:
    """
    Check that every field in *schema* can be matched.

    Raises:
        InvalidInputError: If a field has no aliases, has an alias that
                           normalizes to an empty string, or is keyed under
                           a name other than its own field_name.
    """
    for field_name, field_def in schema.items():
        if field_def.field_name != field_name:
            raise InvalidInputError(
                f"Schema key '{field_name}' does not match field "
                f"'{field_def.field_name}'"
            )
        if not field_def.aliases:
            raise InvalidInputError(f"Field '{field_name}' has no aliases")
        for alias in field_def.aliases:
            if not normalize_header(alias):
                raise InvalidInputError(
                    f"Field '{field_name}' has alias {alias!r} with no letters or digits"
                )


def validate_threshold(value: float) -> None:
    """
    Check that a similarity threshold is a real number in [0, 1].

    Raises:
        InvalidInputError: If the value is missing, NaN or out of range.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(f"Threshold must be a number, got {value!r}")
    if math.isnan(value) or not 0 <= value <= 1:
        raise InvalidInputError(
            f"Threshold must be between 0 and 1, got {value!r}"
        )
