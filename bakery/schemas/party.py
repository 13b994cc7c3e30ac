from decimal import Decimal

from pydantic import Field

from bakery.schemas.common import CamelModel


class PartyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    payment_terms: str | None = None


class PartyUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    payment_terms: str | None = None
    is_active: bool | None = None


class PartyResponse(CamelModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    address: str | None
    payment_terms: str | None
    balance: float
    is_active: bool


class SupplierPaymentCreate(CamelModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: str = "cash"
    notes: str | None = None


class BalanceResponse(CamelModel):
    balance: float
