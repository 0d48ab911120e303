import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from voice2product.config import CATALOG_PATH, CATALOG_SOURCE
from voice2product.schemas.models import CatalogEntry
from voice2product.services.catalog_index import CatalogIndex, build_index
from voice2product.utils.common import to_decimal

log = logging.getLogger(__name__)


class CatalogNotLoadedError(RuntimeError):
    """Matching was attempted before any catalog index was built."""


_index: Optional[CatalogIndex] = None
_reload_lock = threading.Lock()


def get_index() -> CatalogIndex:
    idx = _index
    if idx is None:
        raise CatalogNotLoadedError("Catalog index has not been built; call reload_catalog() first")
    return idx


def swap_index(new_index: Optional[CatalogIndex]) -> None:
    # single reference assignment; readers see the old or the new index, never a mix
    global _index
    _index = new_index


def _entry_from_dict(raw: Dict[str, Any]) -> Optional[CatalogEntry]:
    try:
        return CatalogEntry.model_validate(raw)
    except ValidationError as e:
        log.warning("Skipping catalog record %r: %s", raw, e.errors()[0].get("msg"))
        return None


def parse_catalog_line(line: str) -> Optional[CatalogEntry]:
    """'Name - unit - price', unit and price optional."""
    s = line.strip()
    if not s or s.startswith("#"):
        return None
    parts = [p.strip() for p in s.split(" - ")]
    name = parts[0]
    unit = parts[1] if len(parts) > 1 else ""
    price_raw = parts[2] if len(parts) > 2 else "0"
    price = to_decimal(price_raw.lstrip("$₹").replace(",", ""), None)
    if price is None or price < 0:
        log.warning("Bad price %r for catalog item %r, using 0", price_raw, name)
        price = 0
    return _entry_from_dict({"canonical_name": name, "unit": unit, "price_per_unit": price})


def load_catalog_file(path: str | Path) -> List[CatalogEntry]:
    p = Path(path)
    if not p.exists():
        log.warning("Catalog file %s not found, starting with an empty catalog", p)
        return []

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        data = json.loads(text or "[]")
        if isinstance(data, dict):
            data = data.get("products") or []
        records = [_entry_from_dict(r) for r in data if isinstance(r, dict)]
    else:
        records = [parse_catalog_line(line) for line in text.splitlines()]
    return [r for r in records if r is not None]


def load_catalog_mongo() -> List[CatalogEntry]:
    from voice2product.db.mongo import products
    return [e for e in (_entry_from_dict(d) for d in products.find({}, {"_id": 0})) if e is not None]


def load_catalog(source: Optional[str] = None, path: Optional[str] = None) -> List[CatalogEntry]:
    source = (source or CATALOG_SOURCE).lower()
    if source == "mongo":
        return load_catalog_mongo()
    if source == "file":
        return load_catalog_file(path or CATALOG_PATH)
    raise ValueError(f"Unknown CATALOG_SOURCE '{source}' (expected 'file' or 'mongo')")


def reload_catalog(source: Optional[str] = None, path: Optional[str] = None) -> CatalogIndex:
    with _reload_lock:
        new_index = build_index(load_catalog(source, path))
        swap_index(new_index)
    return new_index
