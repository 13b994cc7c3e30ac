# bakery/routers/parties.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.models.parties import Party
from bakery.models.purchases import Purchase
from bakery.schemas.party import (
    BalanceResponse,
    PartyCreate,
    PartyResponse,
    PartyUpdate,
    SupplierPaymentCreate,
)
from bakery.services import accounts

router = APIRouter(prefix="/api/parties", tags=["Suppliers"])

logger = logging.getLogger("app")


@router.get("", response_model=list[PartyResponse])
def list_parties(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return db.query(Party).order_by(Party.name.asc()).all()


@router.get("/{party_id}", response_model=PartyResponse)
def get_party(
    party_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return accounts.get_party_or_404(db, party_id)


@router.post("", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
def create_party(
    party_data: PartyCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        party = Party(**party_data.model_dump())
        db.add(party)
        db.commit()
        db.refresh(party)

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create supplier", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create supplier")

    return party


@router.put("/{party_id}", response_model=PartyResponse)
def update_party(
    party_id: int,
    party_data: PartyUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    party = accounts.get_party_or_404(db, party_id)

    try:
        for field, value in party_data.model_dump(exclude_unset=True).items():
            setattr(party, field, value)

        db.commit()
        db.refresh(party)

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update supplier {party_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update supplier")

    return party


@router.delete("/{party_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_party(
    party_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    party = accounts.get_party_or_404(db, party_id)

    if party.balance and party.balance != 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Supplier has an outstanding balance",
        )

    try:
        db.query(Purchase).filter(Purchase.party_id == party_id).update(
            {Purchase.party_id: None}, synchronize_session=False
        )
        db.delete(party)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to delete supplier {party_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete supplier")


# =========================================================
# PAYMENTS (PAYABLE)
# =========================================================
@router.post("/{party_id}/payment", response_model=PartyResponse)
def create_payment(
    party_id: int,
    payment: SupplierPaymentCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        party = accounts.create_supplier_payment(
            db,
            party_id,
            payment.amount,
            payment.payment_method,
            notes=payment.notes,
            user_id=current_user.id,
        )
        db.commit()
        db.refresh(party)

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to record payment to supplier {party_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to record supplier payment")

    return party


@router.get("/{party_id}/balance", response_model=BalanceResponse)
def get_balance(
    party_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return {"balance": accounts.get_supplier_balance(db, party_id)}
