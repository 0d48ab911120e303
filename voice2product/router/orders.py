import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Response
from pymongo.errors import PyMongoError

from voice2product.schemas.models import InvoiceRequest, OrderRequest
from voice2product.services.aggregator import aggregate, order_total
from voice2product.services.invoice_pdf import render_invoice
from voice2product.services import order_store

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["orders"])


@router.post("/orders", status_code=201)
def create_order(req: OrderRequest) -> Dict[str, Any]:
    """
    Persist a reviewed order:
    - duplicate products are merged (quantities summed)
    - subtotals and the total are recomputed, client values are ignored
    """
    if not req.products:
        raise HTTPException(status_code=400, detail="No products provided")

    items = aggregate(req.products)
    total = order_total(items)
    try:
        return order_store.create_order(items, total, status=req.status, order_date=req.order_date)
    except PyMongoError as e:
        log.error("Could not create order: %s", e)
        raise HTTPException(status_code=503, detail="Database unavailable. Could not create order.")


@router.post("/generate-pdf")
def generate_pdf(req: InvoiceRequest) -> Response:
    items = aggregate(req.products)
    pdf = render_invoice(req.order_id, req.order_date, req.status, items)
    filename = f"order-{req.order_id or 'draft'}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
