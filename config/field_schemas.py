"""
Field schemas for tabular imports.

Each import type declares its internal fields, the header spellings known to
supply them, and whether the field must be present before an import can go
ahead. Alias lists are matched after header normalization (lowercase,
letters and digits only), so "product_name", "Product Name" and
"PRODUCT-NAME" are all the same alias.

Usage:
    from config.field_schemas import get_field_schema

    schema = get_field_schema("orders")
    schema["email"].aliases   # ("email", "e-mail", ...)
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class FieldDefinition:
    """One internal field and the header aliases that can supply it."""

    field_name: str
    aliases: tuple[str, ...]
    required: bool = False


FieldSchema = Mapping[str, FieldDefinition]


def _build_schema(*fields: FieldDefinition) -> FieldSchema:
    """Key field definitions by name, keeping declaration order."""
    return MappingProxyType({f.field_name: f for f in fields})


# ---------------------------------------------------------------------------
# Order import
# ---------------------------------------------------------------------------

ORDER_FIELDS: FieldSchema = _build_schema(
    FieldDefinition(
        field_name="productName",
        required=True,
        aliases=(
            "productname", "product_name", "product", "item",
            "itemname", "item_name", "sku",
        ),
    ),
    FieldDefinition(
        field_name="customerName",
        required=True,
        aliases=(
            "customername", "customer_name", "customer", "name", "client",
            "clientname", "buyer", "buyername",
        ),
    ),
    FieldDefinition(
        field_name="email",
        required=True,
        aliases=(
            "email", "e-mail", "emailaddress", "email_address",
            "customeremail", "customer_email", "contact", "contactemail",
        ),
    ),
    FieldDefinition(
        field_name="phone",
        aliases=(
            "phone", "phonenumber", "phone_number", "telephone", "tel",
            "mobile", "customerphone", "customer_phone", "contact_number",
        ),
    ),
    FieldDefinition(
        field_name="quantity",
        required=True,
        aliases=(
            "quantity", "qty", "amount", "count", "units",
            "orderquantity", "order_quantity",
        ),
    ),
    FieldDefinition(
        field_name="notes",
        aliases=(
            "notes", "note", "description", "comments", "comment",
            "remarks", "remark", "details",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Product import
# ---------------------------------------------------------------------------

PRODUCT_FIELDS: FieldSchema = _build_schema(
    FieldDefinition(
        field_name="name",
        required=True,
        aliases=(
            "name", "productname", "product_name", "product", "item",
            "itemname", "item_name", "title",
        ),
    ),
    FieldDefinition(
        field_name="category",
        aliases=(
            "category", "productcategory", "product_category", "type",
            "producttype", "product_type", "group",
        ),
    ),
    FieldDefinition(
        field_name="price",
        required=True,
        aliases=(
            "price", "unitprice", "unit_price", "cost", "amount", "rate",
            "productprice", "product_price",
        ),
    ),
    FieldDefinition(
        field_name="stockQuantity",
        aliases=(
            "stockquantity", "stock_quantity", "stock", "quantity", "qty",
            "inventory", "instock", "in_stock", "available",
        ),
    ),
    FieldDefinition(
        field_name="reorderThreshold",
        aliases=(
            "reorderthreshold", "reorder_threshold", "reorder", "minstock",
            "min_stock", "minimum", "threshold",
        ),
    ),
    FieldDefinition(
        field_name="status",
        aliases=(
            "status", "productstatus", "product_status", "state", "active",
            "enabled", "availability",
        ),
    ),
    FieldDefinition(
        field_name="description",
        aliases=(
            "description", "desc", "details", "productdescription",
            "product_description", "info", "notes",
        ),
    ),
    FieldDefinition(
        field_name="sku",
        aliases=(
            "sku", "productsku", "product_sku", "code", "productcode",
            "product_code", "id", "itemid",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Registry: import type → schema
# ---------------------------------------------------------------------------

FIELD_SCHEMAS: Mapping[str, FieldSchema] = MappingProxyType({
    "orders": ORDER_FIELDS,
    "products": PRODUCT_FIELDS,
})


def get_field_schema(import_type: str) -> FieldSchema:
    """
    Retrieve the field schema for an import type.

    Args:
        import_type: "orders" or "products" (case-insensitive).

    Returns:
        Read-only mapping of field name → FieldDefinition.

    Raises:
        ValueError: If the import type has no registered schema.
    """
    key = (import_type or "").strip().lower()
    if key not in FIELD_SCHEMAS:
        raise ValueError(
            f"Unknown import type '{import_type}', "
            f"expected one of {sorted(FIELD_SCHEMAS)}"
        )
    return FIELD_SCHEMAS[key]


def get_required_fields(schema: FieldSchema) -> list[str]:
    """Names of the required fields in *schema*, in declaration order."""
    return [name for name, field_def in schema.items() if field_def.required]
