import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from voice2product.db import mongo
from voice2product.schemas.models import ChangeRecord, LineItem, PricedOrder
from voice2product.utils.common import mongo_safe, serialize_doc

log = logging.getLogger(__name__)


def _object_id(id_: str) -> Optional[ObjectId]:
    try:
        return ObjectId(id_)
    except (InvalidId, TypeError):
        return None


# ---------- transcriptions ----------

def transcription_products(priced: PricedOrder, extractions) -> List[Dict[str, Any]]:
    """Per-utterance rows as the review screen edits them (pre-aggregation)."""
    rows = []
    for i, (raw, m) in enumerate(zip(extractions, priced.matches)):
        entry = m.matched_entry if m.matched else None
        rows.append({
            "id": i,
            "ainame": raw.spoken_label or raw.extracted_name,
            "name": entry.canonical_name if entry else raw.extracted_name,
            "qty": raw.quantity,
            "unit": raw.unit,
            "price": entry.price_per_unit if entry else Decimal("0"),
            "matched": m.matched,
            "confidence": round(m.confidence, 4),
        })
    return rows


def save_transcription(transcript: str, products: List[Dict[str, Any]],
                       changes: List[ChangeRecord] | None = None) -> str:
    doc = {
        "transcription": transcript,
        "products": products,
        "changeHistory": [c.model_dump(mode="json") for c in (changes or [])],
        "createdAt": datetime.now(timezone.utc),
    }
    res = mongo.transcriptions.insert_one(mongo_safe(doc))
    log.info("Transcription %s saved with %d product(s)", res.inserted_id, len(products))
    return str(res.inserted_id)


def latest_transcription() -> Optional[Dict[str, Any]]:
    return serialize_doc(mongo.transcriptions.find_one({}, sort=[("_id", -1)]))


def update_transcription(id_: str, products: List[Dict[str, Any]],
                         change: Optional[ChangeRecord] = None) -> Optional[Dict[str, Any]]:
    oid = _object_id(id_)
    if oid is None:
        return None
    update: Dict[str, Any] = {"$set": {"products": mongo_safe(products)}}
    if change is not None:
        update["$push"] = {"changeHistory": change.model_dump(mode="json")}
    doc = mongo.transcriptions.find_one_and_update(
        {"_id": oid}, update, return_document=ReturnDocument.AFTER
    )
    return serialize_doc(doc)


# ---------- orders ----------

def create_order(items: List[LineItem], total: Decimal, status: str = "pending",
                 order_date: Optional[datetime] = None) -> Dict[str, Any]:
    doc = {
        "products": [it.model_dump(mode="json") for it in items],
        "total": total,
        "status": status,
        "orderDate": order_date or datetime.now(timezone.utc),
        "createdAt": datetime.now(timezone.utc),
    }
    doc = mongo_safe(doc)
    res = mongo.orders.insert_one(doc)
    out = serialize_doc(doc)
    out["_id"] = str(res.inserted_id)
    out["orderId"] = str(res.inserted_id)
    log.info("Order %s created: %d line(s), total %s", res.inserted_id, len(items), total)
    return out
