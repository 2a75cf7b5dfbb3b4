from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from souq_admin.time_utils import parse_iso_datetime


# Maximum price: 9,999,999.99
# This prevents database overflow issues and nonsensical prices
MAX_PRICE = Decimal("9999999.99")
CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Decimal rounded to cents; None counts as zero."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


class ValidationError(ValueError):
    """Caller input problem; raised before any store I/O."""


class ConflictError(ValueError):
    """Business rule conflict (e.g., cancelling a delivered order)."""


class NotFoundError(LookupError):
    """A single-record fetch matched zero rows."""


class StoreError(RuntimeError):
    """The store rejected an operation; message is the store's own text."""


class CapabilityUnavailableError(RuntimeError):
    """An optional store primitive is not offered by the configured store."""


def parse_date_bound(value: str | None, key: str, *, end: bool = False) -> datetime | None:
    """ISO bound; a bare YYYY-MM-DD upper bound covers that whole day."""
    if value is None:
        return None
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{key} must be an ISO-8601 date or datetime")
    if parsed is not None and end and len(value.strip()) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or "e" in stripped.lower() or "." in stripped:
                raise ValidationError(f"{col.key} must be an integer")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        raise ValidationError(f"{col.key} must be an integer")

    # Money and rates: keep Decimal end to end
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{col.key} must be a number")
        if not number.is_finite():
            raise ValidationError(f"{col.key} must be a number")
        return number

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is (JSON columns)
    return value


def validate_payload(*, model: DeclarativeMeta, payload: dict, partial: bool) -> dict:
    """
    Normalizes a command payload against SQLAlchemy column metadata
    (nullable, type, String length). Returns a cleaned patch dict.

    partial=False: create semantics (non-nullable columns without defaults must be present)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid payload")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    if not partial:
        missing = [
            key for key, col in cols.items()
            if not col.nullable
            and not col.primary_key
            and col.default is None
            and col.server_default is None
            and key not in payload
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(sorted(missing))}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

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
    Keep these small and centralized.
    """
    for key in ("base_price", "compare_at_price"):
        price = patch.get(key)
        if price is None:
            continue
        if price < 0:
            raise ValidationError(f"{key} must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"{key} cannot exceed {MAX_PRICE}")

    for key in ("stock_quantity", "low_stock_threshold"):
        if key in patch and patch[key] is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")


def enforce_rules_coupon(patch: dict) -> None:
    value = patch.get("discount_value")
    if value is not None:
        if value < 0:
            raise ValidationError("discount_value must be >= 0")
        if patch.get("discount_type") == "percentage" and value > 100:
            raise ValidationError("discount_value cannot exceed 100 for percentage coupons")

    start, end = patch.get("start_date"), patch.get("end_date")
    if start is not None and end is not None and end < start:
        raise ValidationError("end_date must not be before start_date")


def enforce_rules_currency(patch: dict) -> None:
    rate = patch.get("exchange_rate")
    if rate is not None and rate <= 0:
        raise ValidationError("exchange_rate must be > 0")
