import logging
from decimal import Decimal
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pymongo.errors import PyMongoError

from voice2product.schemas.models import MatchProductRequest, MatchProductResponse
from voice2product.services.catalog_index import build_index
from voice2product.services.catalog_loader import get_index, reload_catalog
from voice2product.services.matcher import match

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["catalog"])


@router.post("/match-product", response_model=MatchProductResponse)
def match_product(req: MatchProductRequest) -> MatchProductResponse:
    """
    Deterministic catalog lookup for one spoken product name.
    Unmatched names come back unchanged with price 0.
    """
    name = (req.product_name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Invalid request format. Requires productName.")

    index = build_index(req.product_list) if req.product_list is not None else get_index()
    result = match(name, index)
    entry = result.matched_entry
    if not result.matched or entry is None:
        return MatchProductResponse(name=name, price=Decimal("0"), confidence=result.confidence, matched=False)
    return MatchProductResponse(
        name=entry.canonical_name,
        price=entry.price_per_unit,
        unit=entry.unit,
        confidence=result.confidence,
        matched=True,
    )


@router.get("/catalog")
def list_catalog() -> Dict[str, Any]:
    index = get_index()
    return {"count": len(index), "products": [e.model_dump(mode="json") for e in index.entries]}


@router.post("/catalog/reload")
def reload() -> Dict[str, Any]:
    try:
        index = reload_catalog()
    except (PyMongoError, OSError, ValueError) as e:
        log.error("Catalog reload failed: %s", e)
        raise HTTPException(status_code=503, detail=f"Catalog reload failed: {e}")
    return {"reloaded": True, "count": len(index), "duplicates": list(index.duplicates)}
