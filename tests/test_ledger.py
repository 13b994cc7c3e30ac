import random
from decimal import Decimal

import pytest

from bakery.core.errors import InsufficientStockError, InvalidInputError, NotFoundError
from bakery.models.inventory import InventoryItem, InventoryTransaction
from bakery.services import ledger


def test_opening_stock_is_posted_as_adjustment(db, make_item, assert_reconciled):
    item = make_item(stock="12.5")

    transactions = db.query(InventoryTransaction).filter_by(inventory_item_id=item.id).all()
    assert len(transactions) == 1
    assert transactions[0].type == "adjustment"
    assert transactions[0].reason == "Opening balance"
    assert Decimal(item.current_stock) == Decimal("12.5")
    assert_reconciled(item)


def test_zero_opening_stock_writes_no_ledger_row(db, make_item):
    item = make_item(stock="0")
    assert db.query(InventoryTransaction).filter_by(inventory_item_id=item.id).count() == 0


def test_in_and_out_move_stock_by_quantity(db, make_item, assert_reconciled):
    item = make_item(stock="10")

    ledger.post_transaction(db, item.id, Decimal("4"), "in", reason="Delivery")
    db.commit()
    db.refresh(item)
    assert Decimal(item.current_stock) == Decimal("14")
    assert item.last_restocked is not None

    ledger.post_transaction(db, item.id, Decimal("2.5"), "out", reason="Waste")
    db.commit()
    db.refresh(item)
    assert Decimal(item.current_stock) == Decimal("11.5")

    assert_reconciled(item)


def test_out_stores_negative_signed_delta(db, make_item):
    item = make_item(stock="5")

    tx = ledger.post_transaction(db, item.id, Decimal("2"), "out")
    db.commit()

    assert Decimal(tx.quantity) == Decimal("-2")


def test_adjustment_applies_signed_quantity(db, make_item, assert_reconciled):
    item = make_item(stock="5")

    ledger.post_transaction(db, item.id, Decimal("-1.25"), "adjustment", reason="Stock count")
    db.commit()
    db.refresh(item)

    assert Decimal(item.current_stock) == Decimal("3.75")
    assert_reconciled(item)


@pytest.mark.parametrize(
    "quantity,type_",
    [
        (Decimal("0"), "in"),
        (Decimal("-3"), "out"),
        (Decimal("0"), "adjustment"),
        (Decimal("1"), "transfer"),
    ],
)
def test_invalid_movements_are_rejected(db, make_item, quantity, type_):
    item = make_item(stock="5")

    with pytest.raises(InvalidInputError):
        ledger.post_transaction(db, item.id, quantity, type_)


def test_unknown_item_raises_not_found(db):
    with pytest.raises(NotFoundError):
        ledger.post_transaction(db, 999, Decimal("1"), "in")


def test_allow_policy_lets_stock_go_negative(db, make_item, assert_reconciled):
    item = make_item(stock="1")

    ledger.post_transaction(db, item.id, Decimal("3"), "out", negative_stock_policy="allow")
    db.commit()
    db.refresh(item)

    assert Decimal(item.current_stock) == Decimal("-2")
    assert_reconciled(item)


def test_reject_policy_blocks_deduction_below_zero(db, make_item, assert_reconciled):
    item = make_item(name="Butter", stock="1")

    with pytest.raises(InsufficientStockError) as exc_info:
        ledger.post_transaction(db, item.id, Decimal("3"), "out", negative_stock_policy="reject")
    db.rollback()

    assert "Butter" in exc_info.value.message
    db.refresh(item)
    assert Decimal(item.current_stock) == Decimal("1")
    assert db.query(InventoryTransaction).filter_by(inventory_item_id=item.id).count() == 1
    assert_reconciled(item)


def test_reject_policy_allows_deduction_to_exactly_zero(db, make_item):
    item = make_item(stock="3")

    ledger.post_transaction(db, item.id, Decimal("3"), "out", negative_stock_policy="reject")
    db.commit()
    db.refresh(item)

    assert Decimal(item.current_stock) == Decimal("0")


def test_reconcile_reports_drift_without_fixing_it(db, make_item):
    item = make_item(stock="10")

    # Simulate an out-of-band edit
    item.current_stock = Decimal("9")
    db.commit()

    result = ledger.reconcile_stock(db, item.id)
    assert result["consistent"] is False
    assert result["difference"] == Decimal("-1")

    db.refresh(item)
    assert Decimal(item.current_stock) == Decimal("9")


def test_list_transactions_newest_first_with_item_name(db, make_item):
    item = make_item(name="Sugar", stock="2")
    ledger.post_transaction(db, item.id, Decimal("1"), "in")
    ledger.post_transaction(db, item.id, Decimal("1"), "out")
    db.commit()

    rows = ledger.list_transactions(db, item_id=item.id)

    assert [r["type"] for r in rows] == ["out", "in", "adjustment"]
    assert all(r["item_name"] == "Sugar" for r in rows)


def test_low_stock_includes_items_at_threshold(db, make_item):
    at = make_item(name="Yeast", stock="2", min_level="2")
    below = make_item(name="Salt", stock="1", min_level="5")
    make_item(name="Flour", stock="50", min_level="10")

    rows = {r["name"]: r for r in ledger.get_low_stock_items(db)}

    assert set(rows) == {"Yeast", "Salt"}
    assert rows["Salt"]["shortage_amount"] == Decimal("4")
    assert rows["Yeast"]["shortage_amount"] == Decimal("0")
    assert rows["Salt"]["supplier"] == "Unknown"
    assert rows[at.name]["id"] == at.id
    assert rows[below.name]["id"] == below.id


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_low_stock_matches_threshold_predicate_for_random_stock(db, make_item, seed):
    rng = random.Random(seed)

    for i in range(25):
        make_item(
            name=f"Item {i}",
            stock=str(rng.randint(0, 20)),
            min_level=str(rng.randint(0, 20)),
        )

    expected = {
        item.id
        for item in db.query(InventoryItem).all()
        if Decimal(item.current_stock) <= Decimal(item.min_level)
    }

    assert {r["id"] for r in ledger.get_low_stock_items(db)} == expected


def test_sub_scale_quantity_is_rounded_once_for_ledger_and_stock(db, make_item, assert_reconciled):
    item = make_item(stock="10")

    transaction = ledger.post_transaction(db, item.id, Decimal("0.0375"), "out", reason="Trim")
    db.commit()
    db.refresh(item)
    db.refresh(transaction)

    assert Decimal(transaction.quantity) == Decimal("-0.038")
    assert Decimal(item.current_stock) == Decimal("9.962")
    assert Decimal(item.current_stock) - Decimal("10") == Decimal(transaction.quantity)
    assert_reconciled(item)


def test_quantity_rounding_to_zero_is_rejected(db, make_item):
    item = make_item(stock="10")

    with pytest.raises(InvalidInputError):
        ledger.post_transaction(db, item.id, Decimal("0.0004"), "out")


@pytest.mark.parametrize(
    "policy, type, expected_lock",
    [
        ("reject", "out", True),
        ("reject", "in", False),
        ("allow", "out", False),
    ],
)
def test_guarded_deductions_lock_the_item_row(db, make_item, monkeypatch, policy, type, expected_lock):
    item = make_item(stock="10")
    locks = []
    original = ledger.get_item_or_404

    def recording_get(db, item_id, for_update=False):
        locks.append(for_update)
        return original(db, item_id, for_update=for_update)

    monkeypatch.setattr(ledger, "get_item_or_404", recording_get)

    ledger.post_transaction(db, item.id, Decimal("1"), type, negative_stock_policy=policy)

    assert locks == [expected_lock]
