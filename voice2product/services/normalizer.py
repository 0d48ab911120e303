"""Unit and quantity cleanup for extracted order lines.

Both functions are best-effort: unknown units pass through untouched and a
garbled quantity becomes 1, so one bad token never sinks a whole order.
"""
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple

log = logging.getLogger(__name__)

DEFAULT_QUANTITY = Decimal("1")

# synonym -> canonical unit; every canonical unit is also a key of itself
UNIT_SYNONYMS: Dict[str, str] = {}
_UNIT_GROUPS: Dict[str, Tuple[str, ...]] = {
    "kg":     ("kg", "kgs", "kilo", "kilos", "kilogram", "kilograms", "kilogramme", "kilogrammes"),
    "gram":   ("gram", "grams", "g", "gm", "gms", "gr", "grm", "gramme", "grammes"),
    "piece":  ("piece", "pieces", "pc", "pcs", "no", "nos", "unit", "units", "item", "items"),
    "ml":     ("ml", "mls", "milliliter", "milliliters", "millilitre", "millilitres"),
    "litre":  ("litre", "litres", "liter", "liters", "l", "ltr", "ltrs", "lt"),
    "dozen":  ("dozen", "dozens", "dz", "doz"),
    "packet": ("packet", "packets", "pack", "packs", "pkt", "pkts"),
    "bunch":  ("bunch", "bunches"),
    "rupees": ("rupees", "rupee", "rs", "inr", "₹"),
}
for _canon, _syns in _UNIT_GROUPS.items():
    for _s in _syns:
        UNIT_SYNONYMS[_s] = _canon

_NUMBER_WORDS: Dict[str, Decimal] = {
    "zero": Decimal(0), "a": Decimal(1), "an": Decimal(1), "one": Decimal(1), "two": Decimal(2),
    "three": Decimal(3), "four": Decimal(4), "five": Decimal(5), "six": Decimal(6),
    "seven": Decimal(7), "eight": Decimal(8), "nine": Decimal(9), "ten": Decimal(10),
    "eleven": Decimal(11), "twelve": Decimal(12), "thirteen": Decimal(13), "fourteen": Decimal(14),
    "fifteen": Decimal(15), "sixteen": Decimal(16), "seventeen": Decimal(17), "eighteen": Decimal(18),
    "nineteen": Decimal(19), "twenty": Decimal(20), "half": Decimal("0.5"), "quarter": Decimal("0.25"),
    "dozen": Decimal(12),
}

_FRACTION_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)$")

# (from, to) -> factor
_CONVERSIONS: Dict[Tuple[str, str], Decimal] = {
    ("gram", "kg"): Decimal("0.001"),
    ("kg", "gram"): Decimal("1000"),
    ("ml", "litre"): Decimal("0.001"),
    ("litre", "ml"): Decimal("1000"),
    ("dozen", "piece"): Decimal("12"),
}


def _unit_key(raw: str) -> str:
    return (raw or "").strip().lower().rstrip(".")


def normalize_unit(raw: str) -> str:
    canon = UNIT_SYNONYMS.get(_unit_key(raw))
    return canon if canon is not None else raw


def parse_quantity(raw) -> Tuple[Decimal, bool]:
    """Returns (quantity, defaulted). defaulted is True when raw was unusable."""
    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        value = Decimal(str(raw)) if isinstance(raw, float) else Decimal(raw)
        if value.is_finite() and value >= 0:
            return value, False
        return DEFAULT_QUANTITY, True

    s = str(raw or "").strip().lower().replace(",", "")
    if not s:
        return DEFAULT_QUANTITY, True

    if s in _NUMBER_WORDS:
        return _NUMBER_WORDS[s], False

    m = _FRACTION_RE.match(s)
    if m:
        num, den = Decimal(m.group(1)), Decimal(m.group(2))
        if den != 0:
            return num / den, False
        return DEFAULT_QUANTITY, True

    try:
        value = Decimal(s)
    except InvalidOperation:
        return DEFAULT_QUANTITY, True
    if not value.is_finite() or value < 0:
        return DEFAULT_QUANTITY, True
    return value, False


def normalize_quantity(raw) -> Decimal:
    value, defaulted = parse_quantity(raw)
    if defaulted:
        log.debug("Unparseable quantity %r, defaulting to %s", raw, DEFAULT_QUANTITY)
    return value


def convert_quantity(qty: Decimal, from_unit: str, to_unit: str) -> Optional[Decimal]:
    src, dst = normalize_unit(from_unit), normalize_unit(to_unit)
    if _unit_key(src) == _unit_key(dst):
        return qty
    factor = _CONVERSIONS.get((src, dst))
    if factor is None:
        return None
    return qty * factor
