from typing import Dict

from bakery.schemas.common import CamelModel


class CostingSettingsResponse(CamelModel):
    labor_rate_per_hour: float
    overhead_percent: float
    production_hours: float


class SettingsResponse(CamelModel):
    values: Dict[str, str | None]
    costing: CostingSettingsResponse
