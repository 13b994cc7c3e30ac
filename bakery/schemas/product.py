from decimal import Decimal
from datetime import datetime
from typing import List

from pydantic import Field

from bakery.schemas.common import CamelModel


class IngredientCreate(CamelModel):
    inventory_item_id: int
    quantity: Decimal = Field(..., gt=0, description="Amount of the item needed for one unit of product")
    unit: str | None = None


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category_id: int | None = None

    price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Selling price must be below 100 million"
    )

    sku: str | None = Field(None, max_length=50)
    is_active: bool = True
    ingredients: List[IngredientCreate] = []


class ProductUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    category_id: int | None = None
    price: Decimal | None = Field(None, ge=0, lt=100_000_000)
    sku: str | None = None
    is_active: bool | None = None
    # When present, replaces the whole bill of materials
    ingredients: List[IngredientCreate] | None = None


class IngredientResponse(CamelModel):
    id: int
    inventory_item_id: int
    item_name: str
    quantity: float
    unit: str | None
    cost_per_unit: float


class ProductResponse(CamelModel):
    id: int
    name: str
    description: str | None
    category_id: int | None
    price: float
    cost: float
    margin: float
    sku: str | None
    is_active: bool
    created_at: datetime
    ingredients: List[IngredientResponse] = []


class CostBreakdownResponse(CamelModel):
    material_cost: float
    labor_cost: float
    overhead_cost: float
    total_cost: float
    per_unit_cost: float
