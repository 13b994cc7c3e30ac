"""Key-value settings store and the typed costing parameters read from it."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from bakery.core.config import settings
from bakery.core.errors import InvalidInputError
from bakery.models.settings import Setting

LABOR_COST_PER_HOUR = "labor_cost_per_hour"
OVERHEAD_PERCENTAGE = "overhead_percentage"
PRODUCTION_TIME_HOURS = "production_time_hours"

NUMERIC_KEYS = (LABOR_COST_PER_HOUR, OVERHEAD_PERCENTAGE, PRODUCTION_TIME_HOURS)


@dataclass(frozen=True)
class CostingSettings:
    labor_rate_per_hour: Decimal
    overhead_percent: Decimal
    production_hours: Decimal


def _parse_decimal(key: str, raw) -> Decimal:
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Setting '{key}' must be a number, got {raw!r}")

    if not value.is_finite() or value < 0:
        raise InvalidInputError(f"Setting '{key}' must be a non-negative number")
    return value


def get_setting_value(db: Session, key: str, default: str | None = None) -> str | None:
    setting = db.query(Setting).filter(Setting.key == key).first()
    if setting is None or setting.value in (None, ""):
        return default
    return setting.value


def get_all_settings(db: Session) -> dict[str, str | None]:
    return {s.key: s.value for s in db.query(Setting).order_by(Setting.key).all()}


def upsert_settings(db: Session, values: dict) -> dict[str, str | None]:
    for key, raw in values.items():
        key = str(key).strip()
        if not key:
            raise InvalidInputError("Setting keys cannot be empty")

        if key in NUMERIC_KEYS:
            _parse_decimal(key, raw)
            type_ = "number"
        elif isinstance(raw, bool):
            type_ = "boolean"
        elif isinstance(raw, (int, float)):
            type_ = "number"
        else:
            type_ = "string"

        if isinstance(raw, bool):
            value = "true" if raw else "false"
        else:
            value = None if raw is None else str(raw)

        setting = db.query(Setting).filter(Setting.key == key).first()
        if setting is None:
            db.add(Setting(key=key, value=value, type=type_))
        else:
            setting.value = value
            setting.type = type_

    db.flush()
    return get_all_settings(db)


def load_costing_settings(db: Session) -> CostingSettings:
    """Read the costing parameters once; missing rows fall back to configured defaults."""
    rows = {
        s.key: s.value
        for s in db.query(Setting).filter(Setting.key.in_(NUMERIC_KEYS)).all()
    }

    def _value(key: str, default: Decimal) -> Decimal:
        raw = rows.get(key)
        if raw in (None, ""):
            return default
        return _parse_decimal(key, raw)

    return CostingSettings(
        labor_rate_per_hour=_value(LABOR_COST_PER_HOUR, settings.DEFAULT_LABOR_COST_PER_HOUR),
        overhead_percent=_value(OVERHEAD_PERCENTAGE, settings.DEFAULT_OVERHEAD_PERCENTAGE),
        production_hours=_value(PRODUCTION_TIME_HOURS, settings.DEFAULT_PRODUCTION_TIME_HOURS),
    )
