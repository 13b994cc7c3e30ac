# bakery/routers/customers.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.models.customers import Customer
from bakery.models.orders import Order
from bakery.schemas.customer import (
    AccountEntryCreate,
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
)
from bakery.schemas.party import BalanceResponse
from bakery.services import accounts

router = APIRouter(prefix="/api/customers", tags=["Customers"])

logger = logging.getLogger("app")


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return db.query(Customer).order_by(Customer.name.asc()).all()


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return accounts.get_customer_or_404(db, customer_id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        customer = Customer(**customer_data.model_dump())
        db.add(customer)
        db.commit()
        db.refresh(customer)

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create customer", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create customer")

    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    customer = accounts.get_customer_or_404(db, customer_id)

    try:
        # Balances only move through /account
        for field, value in customer_data.model_dump(exclude_unset=True).items():
            setattr(customer, field, value)

        db.commit()
        db.refresh(customer)

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update customer {customer_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update customer")

    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    customer = accounts.get_customer_or_404(db, customer_id)

    if customer.balance and customer.balance != 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Customer has an outstanding balance",
        )

    try:
        # Orders keep their customer_name snapshot
        db.query(Order).filter(Order.customer_id == customer_id).update(
            {Order.customer_id: None}, synchronize_session=False
        )
        db.delete(customer)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to delete customer {customer_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete customer")


# =========================================================
# ACCOUNT (RECEIVABLE)
# =========================================================
@router.post("/{customer_id}/account", response_model=CustomerResponse)
def update_account(
    customer_id: int,
    entry: AccountEntryCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        customer = accounts.update_customer_account(
            db,
            customer_id,
            entry.amount,
            entry.type,
            entry.description,
            user_id=current_user.id,
        )
        db.commit()
        db.refresh(customer)

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update account for customer {customer_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update customer account")

    return customer


@router.get("/{customer_id}/balance", response_model=BalanceResponse)
def get_balance(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return {"balance": accounts.get_customer_balance(db, customer_id)}
