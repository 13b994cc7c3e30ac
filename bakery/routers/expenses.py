# bakery/routers/expenses.py

import logging
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.models.expenses import Expense
from bakery.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate

router = APIRouter(prefix="/api/expenses", tags=["Expenses"])

logger = logging.getLogger("app")


def _get_expense_or_404(db: Session, expense_id: int) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


@router.get("", response_model=list[ExpenseResponse])
def list_expenses(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    category: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
):
    query = db.query(Expense)

    if category:
        query = query.filter(Expense.category == category)
    if start_date:
        query = query.filter(Expense.date >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(Expense.date <= datetime.combine(end_date, time.max))

    return query.order_by(Expense.date.desc(), Expense.id.desc()).all()


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return _get_expense_or_404(db, expense_id)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    data = expense_data.model_dump()
    if data.get("date") is None:
        data.pop("date")

    try:
        expense = Expense(**data, created_by_id=current_user.id)
        db.add(expense)
        db.commit()
        db.refresh(expense)

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create expense", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create expense")

    return expense


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    expense = _get_expense_or_404(db, expense_id)

    try:
        for field, value in expense_data.model_dump(exclude_unset=True).items():
            setattr(expense, field, value)

        db.commit()
        db.refresh(expense)

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update expense {expense_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update expense")

    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    expense = _get_expense_or_404(db, expense_id)

    try:
        db.delete(expense)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to delete expense {expense_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete expense")
