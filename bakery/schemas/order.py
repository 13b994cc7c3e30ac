# schemas/order.py

from datetime import datetime
from decimal import Decimal
from typing import List, Literal

from pydantic import Field

from bakery.schemas.common import CamelModel

OrderStatus = Literal["pending", "in_progress", "completed", "cancelled"]


class OrderItemCreate(CamelModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    # Defaults to the product's list price
    unit_price: Decimal | None = Field(None, ge=0)


class OrderCreate(CamelModel):
    customer_id: int | None = None
    customer_name: str | None = Field(None, max_length=200)
    status: OrderStatus = "pending"
    payment_method: str = "cash"
    due_date: datetime | None = None
    notes: str | None = None
    items: List[OrderItemCreate]


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderItemResponse(CamelModel):
    product_id: int
    quantity: int
    unit_price: float
    total_price: float


class OrderResponse(CamelModel):
    id: int
    order_number: str
    customer_id: int | None
    customer_name: str
    status: str
    payment_method: str
    total_amount: float
    order_date: datetime
    due_date: datetime | None
    notes: str | None
    items: List[OrderItemResponse] = []
