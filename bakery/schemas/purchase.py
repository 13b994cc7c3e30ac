from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import Field

from bakery.schemas.common import CamelModel


class PurchaseItemCreate(CamelModel):
    inventory_item_id: int
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)


class PurchaseCreate(CamelModel):
    supplier_name: str = Field(..., min_length=1, max_length=200)
    party_id: int | None = None
    payment_method: str = "cash"
    status: str | None = None
    invoice_number: str | None = None
    notes: str | None = None
    items: List[PurchaseItemCreate]


class PurchaseItemResponse(CamelModel):
    id: int
    inventory_item_id: int
    quantity: float
    unit_price: float
    total_price: float


class PurchaseResponse(CamelModel):
    id: int
    supplier_name: str
    party_id: int | None
    total_amount: float
    payment_method: str
    status: str
    invoice_number: str | None
    notes: str | None
    purchase_date: datetime
    items: List[PurchaseItemResponse] = []
