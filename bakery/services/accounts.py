"""
Customer (receivable) and supplier (payable) running balances.

Balances are changed with atomic `balance = balance + delta` updates. Each
manual account movement also leaves a row in the expenses table, which is
the only history these balances have.
"""

import logging
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session

from bakery.core.errors import InvalidInputError, NotFoundError
from bakery.models.customers import Customer
from bakery.models.expenses import Expense
from bakery.models.parties import Party

logger = logging.getLogger("app")

# Expense rows that only record customer account history
ACCOUNT_HISTORY_CATEGORIES = ("accounts_receivable", "customer_payment")


def _positive(amount) -> Decimal:
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidInputError("Amount must be greater than zero")
    return amount


def get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def get_party_or_404(db: Session, party_id: int) -> Party:
    party = db.query(Party).filter(Party.id == party_id).first()
    if party is None:
        raise NotFoundError(f"Supplier {party_id} not found")
    return party


# ---------------- CUSTOMERS (RECEIVABLE) ----------------

def debit_customer(db: Session, customer_id: int, amount: Decimal) -> None:
    """Customer owes `amount` more; also counts towards lifetime spend."""
    amount = _positive(amount)
    db.execute(
        update(Customer)
        .where(Customer.id == customer_id)
        .values(
            balance=Customer.balance + amount,
            total_spent=Customer.total_spent + amount,
        )
        .execution_options(synchronize_session=False)
    )


def update_customer_account(
    db: Session,
    customer_id: int,
    amount: Decimal,
    type: str,
    description: str,
    user_id: int | None = None,
) -> Customer:
    customer = get_customer_or_404(db, customer_id)
    amount = _positive(amount)

    if type == "debit":
        debit_customer(db, customer.id, amount)
        category = "accounts_receivable"
    elif type == "credit":
        db.execute(
            update(Customer)
            .where(Customer.id == customer.id)
            .values(balance=Customer.balance - amount)
            .execution_options(synchronize_session=False)
        )
        category = "customer_payment"
    else:
        raise InvalidInputError(f"Unknown account entry type '{type}'")

    db.add(
        Expense(
            title=f"Customer account: {description}"[:100],
            description=description,
            amount=amount,
            category=category,
            payment_method="account",
            vendor=customer.name,
            created_by_id=user_id,
        )
    )
    db.flush()
    db.refresh(customer)

    logger.info(f"Customer {customer.id} account {type} {amount}, balance now {customer.balance}")
    return customer


def get_customer_balance(db: Session, customer_id: int) -> Decimal:
    return Decimal(get_customer_or_404(db, customer_id).balance or 0)


# ---------------- SUPPLIERS (PAYABLE) ----------------

def accrue_supplier_balance(db: Session, party_id: int, amount: Decimal) -> None:
    db.execute(
        update(Party)
        .where(Party.id == party_id)
        .values(balance=Party.balance + Decimal(amount))
        .execution_options(synchronize_session=False)
    )


def create_supplier_payment(
    db: Session,
    party_id: int,
    amount: Decimal,
    payment_method: str,
    notes: str | None = None,
    user_id: int | None = None,
) -> Party:
    party = get_party_or_404(db, party_id)
    amount = _positive(amount)

    db.execute(
        update(Party)
        .where(Party.id == party.id)
        .values(balance=Party.balance - amount)
        .execution_options(synchronize_session=False)
    )

    db.add(
        Expense(
            title=f"Payment to {party.name}"[:100],
            description=notes,
            amount=amount,
            category="supplier_payment",
            payment_method=payment_method,
            vendor=party.name,
            created_by_id=user_id,
        )
    )
    db.flush()
    db.refresh(party)

    logger.info(f"Supplier {party.id} paid {amount} via {payment_method}, balance now {party.balance}")
    return party


def get_supplier_balance(db: Session, party_id: int) -> Decimal:
    return Decimal(get_party_or_404(db, party_id).balance or 0)
