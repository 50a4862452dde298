"""
Tests for processing/column_detector.py

Covers:
  - Exact alias matches (formatting-insensitive, always beat fuzzy scores)
  - Fuzzy matches, the 0.6 acceptance threshold and tie-breaking
  - Per-field independence in detect_columns
  - Built-in order/product detection on realistic header rows
  - Schema/threshold validation and manual overrides
"""

import pytest

from config.field_schemas import FieldDefinition, ORDER_FIELDS
from processing.column_detector import (
    InvalidInputError,
    MatchResult,
    apply_column_overrides,
    detect_column,
    detect_columns,
    detect_import_columns,
    detect_order_columns,
    detect_product_columns,
    validate_schema,
    validate_threshold,
)


def _field(name: str = "name", *aliases: str, required: bool = True) -> FieldDefinition:
    """Build a FieldDefinition; aliases default to the field name."""
    return FieldDefinition(field_name=name, aliases=aliases or (name,), required=required)


# ═══════════════════════════════════════════════════════════════════════════
# Exact matches
# ═══════════════════════════════════════════════════════════════════════════

class TestExactMatch:

    def test_formatting_differences_ignored(self):
        result = detect_column(["Product Name"], ORDER_FIELDS["productName"])
        assert result.header == "Product Name"
        assert result.alias == "productname"
        assert result.confidence == 1.0
        assert result.exact_match is True
        assert result.required is True

    def test_exact_beats_earlier_fuzzy_candidate(self):
        """'Prodct' scores 0.86 against 'product' but 'Item' is exact."""
        result = detect_column(["Prodct", "Item"], ORDER_FIELDS["productName"])
        assert result.header == "Item"
        assert result.exact_match is True

    def test_first_header_wins_among_exact_matches(self):
        """Headers are scanned first, so 'Item' wins over a later 'Product Name'."""
        result = detect_column(["Item", "Product Name"], ORDER_FIELDS["productName"])
        assert result.header == "Item"
        assert result.alias == "item"

    def test_duplicate_headers_first_occurrence(self):
        result = detect_column(["SKU", "sku"], _field("sku"))
        assert result.header == "SKU"


# ═══════════════════════════════════════════════════════════════════════════
# Fuzzy matches
# ═══════════════════════════════════════════════════════════════════════════

class TestFuzzyMatch:

    def test_misspelled_header_accepted(self):
        result = detect_column(["Prodcut"], _field("name", "product"))
        assert result.header == "Prodcut"
        assert result.alias == "product"
        assert result.confidence == pytest.approx(5 / 7)
        assert result.exact_match is False

    def test_loose_candidate_rejected(self):
        """Best email alias for 'Client Email' scores 7/12, below 0.6."""
        result = detect_column(["Client Email"], ORDER_FIELDS["email"])
        assert result.header is None
        assert result.alias is None
        assert result.confidence == 0.0
        assert result.exact_match is False
        assert result.required is True

    def test_lower_threshold_accepts_loose_candidate(self):
        result = detect_column(["Client Email"], ORDER_FIELDS["email"], threshold=0.5)
        assert result.header == "Client Email"
        assert result.alias == "contactemail"
        assert result.confidence == pytest.approx(7 / 12)

    def test_tie_prefers_earlier_header(self):
        result = detect_column(["abcx", "abcy"], _field("f", "abcd"))
        assert result.header == "abcx"
        assert result.confidence == pytest.approx(0.75)

    def test_tie_prefers_earlier_alias(self):
        result = detect_column(["abcd"], _field("f", "abcx", "abcy"))
        assert result.alias == "abcx"

    def test_higher_score_on_later_header_wins(self):
        result = detect_column(["abxx", "abcx"], _field("f", "abcd"))
        assert result.header == "abcx"

    @pytest.mark.parametrize("threshold, accepted", [
        (0.0, True),
        (0.6, True),
        (0.7, True),
        (0.75, False),
        (0.8, False),
        (1.0, False),
    ])
    def test_threshold_monotonic(self, threshold, accepted):
        result = detect_column(["Prodcut"], _field("name", "product"), threshold)
        assert result.is_mapped is accepted


# ═══════════════════════════════════════════════════════════════════════════
# Unmatched fields
# ═══════════════════════════════════════════════════════════════════════════

class TestNoMatch:

    def test_no_headers(self):
        result = detect_column([], ORDER_FIELDS["email"])
        assert result == MatchResult(required=True)

    def test_punctuation_only_header_never_matches(self):
        result = detect_column(["---", "   "], _field("notes"))
        assert result.header is None

    def test_blank_header_equals_blank_alias(self):
        """Normalized equality is an exact match even when both sides are empty."""
        result = detect_column(["Qty", ""], FieldDefinition("f", ("", "zzz")))
        assert result.header == ""
        assert result.exact_match is True
        assert result.confidence == 1.0

    def test_optional_field_keeps_required_flag(self):
        result = detect_column(["Qty"], ORDER_FIELDS["phone"])
        assert result.header is None
        assert result.required is False


# ═══════════════════════════════════════════════════════════════════════════
# detect_columns and built-in schemas
# ═══════════════════════════════════════════════════════════════════════════

class TestDetectColumns:

    def test_preserves_schema_order(self):
        mapping = detect_order_columns(["Qty"])
        assert list(mapping) == list(ORDER_FIELDS)

    def test_same_header_can_serve_several_fields(self):
        schema = {
            "quantity": _field("quantity", "qty"),
            "stock": _field("stock", "qty", required=False),
        }
        mapping = detect_columns(["Qty"], schema)
        assert mapping["quantity"].header == "Qty"
        assert mapping["stock"].header == "Qty"

    def test_deterministic(self):
        headers = ["Product Name", "Qty", "Client Email"]
        assert detect_order_columns(headers) == detect_order_columns(headers)

    def test_order_import_with_loose_email_column(self):
        mapping = detect_order_columns(["Product Name", "Qty", "Client Email"])

        assert mapping["productName"].header == "Product Name"
        assert mapping["productName"].exact_match is True
        assert mapping["quantity"].header == "Qty"
        assert mapping["quantity"].alias == "qty"

        # Too far from every email alias
        assert mapping["email"].header is None

        # 'clientname' is four edits from 'clientemail'
        assert mapping["customerName"].header == "Client Email"
        assert mapping["customerName"].alias == "clientname"
        assert mapping["customerName"].confidence == pytest.approx(7 / 11)
        assert mapping["customerName"].exact_match is False

        assert mapping["phone"].header is None
        assert mapping["notes"].header is None

    def test_product_import_exact_columns(self):
        mapping = detect_product_columns(["productname", "price", "instock"])

        assert mapping["name"].header == "productname"
        assert mapping["name"].exact_match is True
        assert mapping["price"].header == "price"
        assert mapping["price"].exact_match is True
        assert mapping["stockQuantity"].header == "instock"
        assert mapping["stockQuantity"].exact_match is True

        # 'minstock' is one edit from 'instock'
        assert mapping["reorderThreshold"].header == "instock"
        assert mapping["reorderThreshold"].confidence == pytest.approx(7 / 8)

        assert mapping["description"].header is None

    def test_detect_import_columns_by_name(self):
        mapping = detect_import_columns(["Name", "Unit Price"], "products")
        assert mapping["name"].header == "Name"
        assert mapping["price"].header == "Unit Price"

    def test_detect_import_columns_unknown_type(self):
        with pytest.raises(InvalidInputError, match="invoices"):
            detect_import_columns(["Name"], "invoices")

    def test_custom_threshold_passed_through(self):
        mapping = detect_order_columns(["Client Email"], threshold=0.5)
        assert mapping["email"].header == "Client Email"


# ═══════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════

class TestValidation:

    def test_field_without_aliases_rejected(self):
        schema = {"notes": FieldDefinition("notes", ())}
        with pytest.raises(InvalidInputError, match="notes"):
            detect_columns(["Notes"], schema)

    def test_aliases_that_normalize_to_nothing_rejected(self):
        with pytest.raises(InvalidInputError):
            validate_schema({"notes": FieldDefinition("notes", ("--", " "))})

    def test_one_blank_alias_among_good_ones_rejected(self):
        schema = {"notes": FieldDefinition("notes", ("notes", "--"))}
        with pytest.raises(InvalidInputError, match="'--'"):
            detect_columns(["Notes"], schema)

    def test_key_must_match_field_name(self):
        with pytest.raises(InvalidInputError, match="does not match"):
            validate_schema({"note": _field("notes")})

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)

    @pytest.mark.parametrize("value", [0, 0.6, 1, 1.0])
    def test_valid_thresholds(self, value):
        validate_threshold(value)

    @pytest.mark.parametrize("value", [
        -0.1, 1.5, float("nan"), None, "0.6", True,
    ])
    def test_invalid_thresholds(self, value):
        with pytest.raises(InvalidInputError):
            validate_threshold(value)

    def test_detect_column_checks_threshold(self):
        with pytest.raises(InvalidInputError):
            detect_column(["Qty"], ORDER_FIELDS["quantity"], threshold=-1)


# ═══════════════════════════════════════════════════════════════════════════
# Manual overrides
# ═══════════════════════════════════════════════════════════════════════════

class TestColumnOverrides:

    HEADERS = ["Product Name", "Qty", "Client Email"]

    def test_pin_field_to_header(self):
        mapping = detect_order_columns(self.HEADERS)
        updated = apply_column_overrides(mapping, {"email": "Client Email"}, self.HEADERS)

        assert updated["email"].header == "Client Email"
        assert updated["email"].confidence == 1.0
        assert updated["email"].exact_match is True
        assert updated["email"].alias is None
        assert updated["email"].required is True

    def test_clear_field(self):
        mapping = detect_order_columns(self.HEADERS)
        updated = apply_column_overrides(mapping, {"customerName": None}, self.HEADERS)
        assert updated["customerName"] == MatchResult(required=True)

    def test_other_fields_untouched_and_input_unchanged(self):
        mapping = detect_order_columns(self.HEADERS)
        original_email = mapping["email"]
        updated = apply_column_overrides(mapping, {"email": "Client Email"}, self.HEADERS)

        assert updated["quantity"] is mapping["quantity"]
        assert mapping["email"] is original_email
        assert list(updated) == list(mapping)

    def test_unknown_field_rejected(self):
        mapping = detect_order_columns(self.HEADERS)
        with pytest.raises(InvalidInputError, match="shipping"):
            apply_column_overrides(mapping, {"shipping": "Qty"}, self.HEADERS)

    def test_missing_header_rejected(self):
        mapping = detect_order_columns(self.HEADERS)
        with pytest.raises(InvalidInputError, match="Phone"):
            apply_column_overrides(mapping, {"phone": "Phone"}, self.HEADERS)
