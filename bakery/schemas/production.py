from datetime import datetime
from decimal import Decimal
from typing import List, Literal

from pydantic import Field

from bakery.schemas.common import CamelModel
from bakery.schemas.product import CostBreakdownResponse

ScheduleStatus = Literal["scheduled", "in_progress", "completed", "delayed", "cancelled"]
Priority = Literal["low", "medium", "high"]


class ScheduleCreate(CamelModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    scheduled_date: datetime
    start_time: datetime | None = None
    end_time: datetime | None = None
    priority: Priority = "medium"
    assigned_to_id: int | None = None
    notes: str | None = None


class ScheduleUpdate(CamelModel):
    quantity: int | None = Field(None, gt=0)
    scheduled_date: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    priority: Priority | None = None
    status: ScheduleStatus | None = None
    assigned_to_id: int | None = None
    notes: str | None = None


class ScheduleResponse(CamelModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    actual_quantity: float | None
    scheduled_date: datetime
    start_time: datetime | None
    end_time: datetime | None
    priority: str
    status: str
    assigned_to_id: int | None
    notes: str | None
    completed_at: datetime | None


class IngredientRequirement(CamelModel):
    inventory_item_id: int
    item_name: str
    required_quantity: float
    available_stock: float
    unit: str
    sufficient: bool


class ScheduleWithCostResponse(CamelModel):
    schedule: ScheduleResponse
    cost_breakdown: CostBreakdownResponse
    ingredient_requirements: List[IngredientRequirement]


class ProcessProductionRequest(CamelModel):
    actual_quantity: Decimal = Field(..., gt=0)
