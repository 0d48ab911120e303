from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from voice2product.schemas.models import LineItem
from voice2product.services.catalog_index import normalize_name


def _group_key(it: LineItem) -> Tuple[str, str]:
    return normalize_name(it.name), normalize_name(it.unit)


def aggregate(items: Iterable[LineItem]) -> List[LineItem]:
    """
    Merge lines for the same product in the same unit.
    - quantities are summed
    - first-seen name spelling and unit price are kept
    - the same name in two units stays two lines (2 kg + 6 piece is not 8 of anything)
    - output keeps first-appearance order
    subtotal is recomputed by LineItem itself.
    """
    acc: Dict[Tuple[str, str], LineItem] = {}
    qty: Dict[Tuple[str, str], Decimal] = {}

    for it in items or []:
        key = _group_key(it)
        if key not in acc:
            acc[key] = it
            qty[key] = it.quantity
        else:
            qty[key] += it.quantity

    return [acc[k].model_copy(update={"quantity": qty[k]}) for k in acc]


def order_total(items: Iterable[LineItem]) -> Decimal:
    return sum((it.subtotal for it in items or []), Decimal("0"))
