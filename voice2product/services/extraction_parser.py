"""Parse the extraction LLM's reply into RawExtraction records.

Prompt contract v1 asks the model for one product per line:

    <spoken label> - Name: <name>, Quantity: <number>, Unit: <unit>

The reply is free text, so the pattern is applied across the whole reply
rather than per line, and anything that does not fit is skipped. Runs of
spaces are collapsed but line breaks are kept: a line break ends a unit, so
an empty unit never swallows the next record's label. Changing the prompt
format means bumping EXTRACTION_FORMAT_VERSION together with EXTRACTION_RE.
"""
import logging
import re
from typing import List

from voice2product.schemas.models import RawExtraction
from voice2product.services.normalizer import parse_quantity
from voice2product.utils.common import collapse_ws

log = logging.getLogger(__name__)

EXTRACTION_FORMAT_VERSION = 1

_LABEL = r"[^\W_][\w '&()/-]*?"
_NAME_KEY = r"[*_ ]*-[*_ ]*Name\s*:"

EXTRACTION_RE = re.compile(
    rf"(?P<label>{_LABEL})"   # spoken label, as uttered
    rf"{_NAME_KEY}\s*(?P<name>[^,]+?)\s*,\s*"
    r"Quantity\s*:\s*(?P<quantity>\d{1,3}(?:,\d{3})+(?:\.\d+)?|[^,]*?)\s*,\s*"
    # a lone word directly followed by "- Name:" is the next label, not a unit
    rf"Unit[ \t]*:[ \t]*(?P<unit>(?:[^\W\d_]+(?!\w)(?!{_NAME_KEY}))?)",
    re.IGNORECASE,
)


def format_extraction_line(label: str, name: str, quantity, unit: str) -> str:
    return f"{label} - Name: {name}, Quantity: {quantity}, Unit: {unit}"


def _squash(text: str) -> str:
    return "\n".join(collapse_ws(line) for line in (text or "").splitlines())


def parse(response_text: str) -> List[RawExtraction]:
    text = _squash(response_text)
    out: List[RawExtraction] = []
    for m in EXTRACTION_RE.finditer(text):
        name = collapse_ws(m.group("name")).strip(" *_")
        if not name:
            continue
        qty, defaulted = parse_quantity(m.group("quantity"))
        if defaulted:
            log.warning("Quantity %r for %r unreadable, using %s", m.group("quantity"), name, qty)
        out.append(RawExtraction(
            spoken_label=m.group("label").strip(),
            extracted_name=name,
            quantity=qty,
            unit=m.group("unit").strip(),
            quantity_defaulted=defaulted,
        ))
    log.debug("Parsed %d extraction(s) from %d chars", len(out), len(text))
    return out
