# Overview: Payload validation against model metadata plus the small business rules on top.

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError

# Largest accepted unit price; keeps values inside Numeric(12, 2)
MAX_PRICE = Decimal("9999999999.99")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - aliases: alternate payload keys mapped onto column keys (e.g. camelCase)
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    aliases: dict[str, str] | None = None


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input (multipart forms) - must be plain digits
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    # Decimals (prices)
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        if isinstance(value, (int, float, Decimal, str)):
            try:
                number = Decimal(str(value).strip())
            except InvalidOperation:
                raise ValidationError(f"{col.key} must be a number")
            if not number.is_finite():
                raise ValidationError(f"{col.key} must be a finite number")
            scale = getattr(coltype, "scale", None)
            if scale is not None:
                # Round to the stored precision so range checks see the persisted value
                try:
                    number = number.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)
                except InvalidOperation:
                    raise ValidationError(f"{col.key} is out of range")
            return number
        raise ValidationError(f"{col.key} must be a number")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON or form data against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    aliases = policy.aliases or {}
    payload = {aliases.get(k, k): v for k, v in payload.items()}

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Applied to whichever fields the patch carries.
    """
    if "name" in patch and not patch["name"]:
        raise ValidationError("name cannot be blank")

    if "price" in patch:
        price = patch["price"]
        if price is None or price <= 0:
            raise ValidationError("price must be > 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE}")

    if "stock" in patch:
        stock = patch["stock"]
        if stock is None or stock < 0:
            raise ValidationError("stock must be >= 0")


def enforce_rules_sale(patch: dict) -> None:
    # SALE requires a product snapshot name, qty > 0 and a positive total
    if not patch.get("product_name"):
        raise ValidationError("product_name is required")

    quantity = patch.get("quantity")
    if quantity is None or quantity <= 0:
        raise ValidationError("quantity must be > 0")

    total_price = patch.get("total_price")
    if total_price is None or total_price <= 0:
        raise ValidationError("total_price must be > 0")
    if total_price > MAX_PRICE:
        raise ValidationError(f"total_price cannot exceed {MAX_PRICE}")


def parse_quantity(value: Any) -> int:
    """Strict positive-integer parse for stock movements."""
    if isinstance(value, bool) or value is None:
        raise ValidationError("quantity must be a positive integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("quantity must be an integer, not a decimal")
        value = int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdigit():
            raise ValidationError("quantity must be a positive integer")
        value = int(stripped)
    if not isinstance(value, int):
        raise ValidationError("quantity must be a positive integer")
    if value <= 0:
        raise ValidationError("quantity must be > 0")
    return value
