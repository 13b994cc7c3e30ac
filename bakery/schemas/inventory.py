from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field

from bakery.schemas.common import CamelModel

TransactionType = Literal["in", "out", "adjustment"]


class InventoryItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    unit: str = Field(..., min_length=1, max_length=50)
    # Opening balance, posted to the ledger as an adjustment
    current_stock: Decimal = Decimal("0")
    min_level: Decimal = Field(Decimal("0"), ge=0)
    cost_per_unit: Decimal = Field(Decimal("0"), ge=0)
    supplier: str | None = None
    company: str | None = None
    category_id: int | None = None


class InventoryItemUpdate(CamelModel):
    name: str | None = None
    unit: str | None = None
    min_level: Decimal | None = Field(None, ge=0)
    cost_per_unit: Decimal | None = Field(None, ge=0)
    supplier: str | None = None
    company: str | None = None
    category_id: int | None = None


class InventoryItemResponse(CamelModel):
    id: int
    name: str
    current_stock: float
    min_level: float
    unit: str
    cost_per_unit: float
    supplier: str | None
    company: str | None
    category_id: int | None
    last_restocked: datetime | None


class InventoryTransactionCreate(CamelModel):
    quantity: Decimal
    type: TransactionType
    reason: str | None = Field(None, max_length=200)
    reference: str | None = Field(None, max_length=100)


class InventoryTransactionResponse(CamelModel):
    id: int
    inventory_item_id: int
    item_name: str
    type: TransactionType
    quantity: float
    reason: str | None
    reference: str | None
    created_by_id: int | None
    created_at: datetime


class LowStockItemResponse(CamelModel):
    id: int
    name: str
    current_stock: float
    min_level: float
    unit: str
    supplier: str
    shortage_amount: float


class StockReconciliationResponse(CamelModel):
    inventory_item_id: int
    stored: float
    ledger: float
    difference: float
    consistent: bool
