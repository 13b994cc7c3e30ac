from datetime import datetime
from decimal import Decimal

import pytest

from bakery.core.errors import (
    ConcurrencyConflictError,
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
)
from bakery.core.config import settings
from bakery.models.inventory import InventoryTransaction
from bakery.services import production


@pytest.fixture
def bread_run(db, make_item, make_product):
    flour = make_item(name="Flour", stock="10", cost="1.00")
    salt = make_item(name="Salt", stock="1", cost="0.50")
    bread = make_product(name="Country loaf", ingredients=[(flour, "0.5"), (salt, "0.01")])

    result = production.create_schedule_with_cost_tracking(
        db,
        {"product_id": bread.id, "quantity": 5, "scheduled_date": datetime(2026, 10, 19, 6, 0)},
    )
    db.commit()
    return flour, salt, result["schedule"]["id"]


def test_schedule_with_cost_tracking_returns_breakdown_and_requirements(db, make_item, make_product):
    flour = make_item(name="Flour", stock="1", cost="1.00")
    bread = make_product(ingredients=[(flour, "0.5")])

    result = production.create_schedule_with_cost_tracking(
        db,
        {"product_id": bread.id, "quantity": 4, "scheduled_date": datetime(2026, 10, 19, 6, 0)},
    )
    db.commit()

    assert result["schedule"]["status"] == "scheduled"
    assert result["schedule"]["product_name"] == "Bread"
    assert result["cost_breakdown"]["material_cost"] == Decimal("2")
    assert result["ingredient_requirements"][0]["sufficient"] is False

    # Planning never touches stock
    db.refresh(flour)
    assert Decimal(flour.current_stock) == Decimal("1")


def test_process_deducts_ingredients_and_completes(db, bread_run, assert_reconciled):
    flour, salt, run_id = bread_run

    schedule = production.process_production(db, run_id, Decimal("5"))
    db.commit()
    db.refresh(flour)
    db.refresh(salt)

    assert Decimal(flour.current_stock) == Decimal("7.5")
    assert Decimal(salt.current_stock) == Decimal("0.95")
    assert schedule.status == "completed"
    assert Decimal(schedule.actual_quantity) == Decimal("5")
    assert schedule.completed_at is not None

    out = db.query(InventoryTransaction).filter_by(inventory_item_id=flour.id, type="out").one()
    assert out.reason == f"Production #{run_id}"
    assert Decimal(out.quantity) == Decimal("-2.5")
    assert_reconciled(flour, salt)


def test_actual_quantity_drives_deduction(db, bread_run):
    flour, _, run_id = bread_run

    production.process_production(db, run_id, Decimal("3"))
    db.commit()
    db.refresh(flour)

    assert Decimal(flour.current_stock) == Decimal("8.5")


def test_reprocessing_is_rejected_without_double_deduction(db, bread_run, assert_reconciled):
    flour, salt, run_id = bread_run

    production.process_production(db, run_id, Decimal("5"))
    db.commit()

    with pytest.raises(ConcurrencyConflictError):
        production.process_production(db, run_id, Decimal("5"))
    db.rollback()

    db.refresh(flour)
    assert Decimal(flour.current_stock) == Decimal("7.5")
    assert_reconciled(flour, salt)


def test_cancelled_run_cannot_be_processed(db, bread_run):
    flour, _, run_id = bread_run

    production.update_schedule_item(db, run_id, {"status": "cancelled"})
    db.commit()

    with pytest.raises(ConcurrencyConflictError):
        production.process_production(db, run_id, Decimal("5"))


def test_unknown_run_raises_not_found(db):
    with pytest.raises(NotFoundError) as exc_info:
        production.process_production(db, 999, Decimal("1"))

    assert exc_info.value.message == "Production schedule not found"


def test_non_positive_actual_quantity_is_rejected(db, bread_run):
    _, _, run_id = bread_run

    with pytest.raises(InvalidInputError):
        production.process_production(db, run_id, Decimal("0"))


def test_reject_policy_rolls_back_partial_deductions(db, bread_run, monkeypatch, assert_reconciled):
    flour, salt, run_id = bread_run
    monkeypatch.setattr(settings, "NEGATIVE_STOCK_POLICY", "reject")

    # 200 loaves need 100 kg flour; only 10 in stock
    with pytest.raises(InsufficientStockError):
        production.process_production(db, run_id, Decimal("200"))
    db.rollback()

    db.refresh(flour)
    db.refresh(salt)
    assert Decimal(flour.current_stock) == Decimal("10")
    assert Decimal(salt.current_stock) == Decimal("1")
    assert production.get_schedule_item_or_404(db, run_id).status == "scheduled"
    assert_reconciled(flour, salt)


def test_update_cannot_complete_a_run(db, bread_run):
    _, _, run_id = bread_run

    with pytest.raises(InvalidInputError):
        production.update_schedule_item(db, run_id, {"status": "completed"})


def test_completed_run_cannot_be_deleted(db, bread_run):
    _, _, run_id = bread_run
    production.process_production(db, run_id, Decimal("5"))
    db.commit()

    with pytest.raises(ConcurrencyConflictError):
        production.delete_schedule_item(db, run_id)


def test_list_schedule_filters_by_day(db, bread_run):
    _, _, run_id = bread_run

    assert [s.id for s in production.list_schedule(db, datetime(2026, 10, 19).date())] == [run_id]
    assert production.list_schedule(db, datetime(2026, 10, 20).date()) == []


def test_four_decimal_recipe_deducts_the_same_amount_it_records(db, make_item, make_product, assert_reconciled):
    yeast = make_item(name="Yeast", stock="10", cost="4.00")
    roll = make_product(name="Roll", ingredients=[(yeast, "0.0125")])
    result = production.create_schedule_with_cost_tracking(
        db,
        {"product_id": roll.id, "quantity": 3, "scheduled_date": datetime(2026, 10, 19, 6, 0)},
    )
    db.commit()

    production.process_production(db, result["schedule"]["id"], Decimal("3"))
    db.commit()
    db.refresh(yeast)

    movement = (
        db.query(InventoryTransaction)
        .filter_by(inventory_item_id=yeast.id, type="out")
        .one()
    )
    assert Decimal(movement.quantity) == Decimal("-0.038")
    assert Decimal(yeast.current_stock) == Decimal("9.962")
    assert_reconciled(yeast)
