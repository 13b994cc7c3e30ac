from decimal import Decimal
from typing import Literal

from pydantic import Field

from bakery.schemas.common import CamelModel


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class CustomerUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    is_active: bool | None = None


class CustomerResponse(CamelModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    address: str | None
    total_spent: float
    balance: float
    is_active: bool


class AccountEntryCreate(CamelModel):
    amount: Decimal = Field(..., gt=0)
    # debit: customer owes more, credit: customer paid
    type: Literal["debit", "credit"]
    description: str = Field(..., min_length=1, max_length=200)
