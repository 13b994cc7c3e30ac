from datetime import datetime
from decimal import Decimal

from pydantic import Field

from bakery.schemas.common import CamelModel


class ExpenseCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=50)
    amount: Decimal = Field(..., gt=0)
    date: datetime | None = None
    description: str | None = None
    payment_method: str | None = None
    vendor: str | None = None


class ExpenseUpdate(CamelModel):
    title: str | None = None
    category: str | None = None
    amount: Decimal | None = Field(None, gt=0)
    date: datetime | None = None
    description: str | None = None
    payment_method: str | None = None
    vendor: str | None = None


class ExpenseResponse(CamelModel):
    id: int
    title: str
    category: str
    amount: float
    date: datetime
    description: str | None
    payment_method: str | None
    vendor: str | None
