import logging
from decimal import Decimal
from typing import Iterable, List, Tuple

from voice2product.schemas.models import ChangeRecord, LineItem, PricedOrder, RawExtraction
from voice2product.services.aggregator import aggregate
from voice2product.services.catalog_index import CatalogIndex
from voice2product.services.extraction_parser import parse
from voice2product.services.matcher import match
from voice2product.services.normalizer import convert_quantity, normalize_unit

log = logging.getLogger(__name__)


def _priced_line(raw: RawExtraction, result) -> Tuple[LineItem, str]:
    """Returns the priced line and a warning ("" when there is nothing to review)."""
    spoken_unit = normalize_unit(raw.unit)
    entry = result.matched_entry
    if not result.matched or entry is None:
        # keep the utterance, unpriced, for a human to resolve
        line = LineItem(name=raw.extracted_name, unit=spoken_unit, quantity=raw.quantity, unit_price=Decimal("0"))
        return line, ""

    qty = raw.quantity
    unit = entry.unit or spoken_unit
    warning = ""
    if entry.unit and spoken_unit:
        converted = convert_quantity(qty, spoken_unit, entry.unit)
        if converted is None:
            # the line keeps what was said; the catalog price is per entry.unit
            unit = spoken_unit
            warning = (
                f"{entry.canonical_name}: ordered {qty} {spoken_unit} but priced per "
                f"{entry.unit}; check the quantity"
            )
            log.warning(
                "Unit %r for %r cannot be converted to catalog unit %r, keeping %s %s",
                spoken_unit, entry.canonical_name, entry.unit, qty, spoken_unit,
            )
        else:
            qty = converted
    line = LineItem(name=entry.canonical_name, unit=unit, quantity=qty, unit_price=entry.price_per_unit)
    return line, warning


def price_extractions(extractions: Iterable[RawExtraction], index: CatalogIndex) -> PricedOrder:
    lines: List[LineItem] = []
    matches = []
    changes: List[ChangeRecord] = []
    warnings: List[str] = []

    for i, raw in enumerate(extractions or []):
        result = match(raw.extracted_name, index)
        matches.append(result)
        line, warning = _priced_line(raw, result)
        if result.matched and line.name != raw.extracted_name:
            changes.append(ChangeRecord(old_value=raw.extracted_name, new_value=line.name, product_index=i))
        if warning:
            warnings.append(warning)
        lines.append(line)

    unmatched = [m.query for m in matches if not m.matched]
    if unmatched:
        log.info("Unmatched items carried at price 0: %s", ", ".join(unmatched))

    return PricedOrder(items=aggregate(lines), matches=matches, changes=changes, warnings=warnings)


def process_response_text(response_text: str, index: CatalogIndex) -> PricedOrder:
    """LLM reply text -> priced, aggregated order."""
    return price_extractions(parse(response_text), index)
