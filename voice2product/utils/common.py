from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

_CENT = Decimal("0.01")


def money(n) -> Decimal:
    # half-up rounding to 2dp
    return Decimal(str(n)).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        return default
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return d if d.is_finite() else default


def collapse_ws(s: str) -> str:
    return " ".join((s or "").split())


def mongo_safe(value: Any) -> Any:
    """Recursively turn Decimals into floats; BSON has no native Decimal."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: mongo_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [mongo_safe(v) for v in value]
    return value


def serialize_doc(doc: dict | None) -> dict | None:
    """Mongo document -> JSON-friendly dict (ObjectId to str)."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out
