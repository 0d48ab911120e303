from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, computed_field, field_validator,
)

from voice2product.utils.common import collapse_ws

# Decimals go over the wire (and into Mongo) as plain JSON numbers
Num = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# ---------------------------------------------------------------------
# CORE MODELS
# ---------------------------------------------------------------------

class CatalogEntry(BaseModel):
    """One sellable product. Read-only once the catalog is loaded."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    canonical_name: str = Field(validation_alias=AliasChoices("canonical_name", "canonicalName", "name"))
    unit: str = ""  # empty: keep whatever unit the customer said
    price_per_unit: Num = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("price_per_unit", "pricePerUnit", "unitPrice", "price"),
    )

    @field_validator("canonical_name")
    def v_name(cls, v):
        v = collapse_ws(v)
        if not v:
            raise ValueError("canonical_name must not be blank")
        return v

    @field_validator("unit", mode="before")
    def v_unit(cls, v):
        return collapse_ws(v or "")


class RawExtraction(BaseModel):
    """One (name, quantity, unit) triple pulled out of the LLM response."""
    spoken_label: str = ""
    extracted_name: str
    quantity: Num = Decimal("1")
    unit: str = ""
    quantity_defaulted: bool = False


class MatchResult(BaseModel):
    query: str
    matched_entry: Optional[CatalogEntry] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    matched: bool = False


class LineItem(BaseModel):
    """Priced order line. subtotal is always quantity * unit_price."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    unit: str = ""
    quantity: Num = Field(default=Decimal("1"), ge=0, validation_alias=AliasChoices("quantity", "qty"))
    unit_price: Num = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("unit_price", "unitPrice", "price"),
    )

    @field_validator("quantity", "unit_price", mode="before")
    def v_null_numbers(cls, v):
        # the order UI sends price: null for unmatched products
        return Decimal("0") if v is None else v

    @computed_field
    @property
    def subtotal(self) -> Num:
        return self.quantity * self.unit_price


class ChangeRecord(BaseModel):
    """Audit entry: the spoken product name was replaced by a catalog name."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    old_value: str = Field(validation_alias=AliasChoices("old_value", "oldValue"))
    new_value: str = Field(validation_alias=AliasChoices("new_value", "newValue"))
    product_index: int = Field(default=0, validation_alias=AliasChoices("product_index", "productIndex"))


class PricedOrder(BaseModel):
    items: List[LineItem] = Field(default_factory=list)
    matches: List[MatchResult] = Field(default_factory=list)
    changes: List[ChangeRecord] = Field(default_factory=list)
    # unit mismatches a reviewer has to look at
    warnings: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> Num:
        return sum((it.subtotal for it in self.items), Decimal("0"))

    @property
    def unmatched(self) -> List[MatchResult]:
        return [m for m in self.matches if not m.matched]


# ---------------------------------------------------------------------
# HTTP SCHEMAS
# ---------------------------------------------------------------------

class OrderRequest(BaseModel):
    """Request body for POST /api/orders."""
    model_config = ConfigDict(extra="ignore")

    products: List[LineItem] = Field(default_factory=list)
    status: str = "pending"
    order_date: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("order_date", "orderDate"))


class MatchProductRequest(BaseModel):
    product_name: str = Field(default="", validation_alias=AliasChoices("product_name", "productName"))
    # optional ad-hoc catalog; the loaded catalog is used when omitted
    product_list: Optional[List[CatalogEntry]] = Field(
        default=None, validation_alias=AliasChoices("product_list", "productList")
    )


class MatchProductResponse(BaseModel):
    name: str
    price: Num
    unit: str = ""
    confidence: float
    matched: bool


class TranscriptionUpdate(BaseModel):
    products: Optional[List[Dict[str, Any]]] = None
    change_record: Optional[ChangeRecord] = Field(
        default=None, validation_alias=AliasChoices("change_record", "changeRecord")
    )


class InvoiceRequest(BaseModel):
    """Request body for POST /api/generate-pdf. Any client-side total is ignored."""
    model_config = ConfigDict(extra="ignore")

    order_id: str = Field(default="", validation_alias=AliasChoices("order_id", "orderId"))
    order_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("order_date", "orderDate"))
    status: str = "pending"
    products: List[LineItem] = Field(default_factory=list)
