from decimal import Decimal

import pytest

from bakery.core.errors import InvalidInputError, NotFoundError
from bakery.models.expenses import Expense
from bakery.services import accounts


def test_customer_debit_raises_balance_and_total_spent(db, make_customer):
    customer = make_customer()

    accounts.update_customer_account(db, customer.id, Decimal("40"), "debit", "Wedding cake")
    db.commit()
    db.refresh(customer)

    assert Decimal(customer.balance) == Decimal("40")
    assert Decimal(customer.total_spent) == Decimal("40")

    history = db.query(Expense).one()
    assert history.category == "accounts_receivable"
    assert history.vendor == customer.name


def test_customer_credit_lowers_balance_only(db, make_customer):
    customer = make_customer(balance="100")

    accounts.update_customer_account(db, customer.id, Decimal("30"), "credit", "Cash payment")
    db.commit()

    assert accounts.get_customer_balance(db, customer.id) == Decimal("70")
    db.refresh(customer)
    assert Decimal(customer.total_spent) == Decimal("0")
    assert db.query(Expense).one().category == "customer_payment"


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
def test_non_positive_amounts_are_rejected(db, make_customer, amount):
    customer = make_customer()

    with pytest.raises(InvalidInputError):
        accounts.update_customer_account(db, customer.id, amount, "debit", "Nothing")


def test_unknown_entry_type_is_rejected(db, make_customer):
    customer = make_customer()

    with pytest.raises(InvalidInputError):
        accounts.update_customer_account(db, customer.id, Decimal("5"), "refund", "Oops")


def test_unknown_customer_raises_not_found(db):
    with pytest.raises(NotFoundError):
        accounts.get_customer_balance(db, 321)


def test_supplier_payment_decrements_balance_and_records_expense(db, make_party):
    party = make_party(name="Dairy Farm", balance="250")

    accounts.create_supplier_payment(db, party.id, Decimal("100"), "bank_transfer", notes="Invoice 17")
    db.commit()

    assert accounts.get_supplier_balance(db, party.id) == Decimal("150")

    expense = db.query(Expense).one()
    assert expense.title == "Payment to Dairy Farm"
    assert expense.category == "supplier_payment"
    assert expense.payment_method == "bank_transfer"
    assert Decimal(expense.amount) == Decimal("100")


def test_supplier_balance_can_go_into_credit(db, make_party):
    party = make_party(balance="10")

    accounts.create_supplier_payment(db, party.id, Decimal("25"), "cash")
    db.commit()

    assert accounts.get_supplier_balance(db, party.id) == Decimal("-15")
