# bakery/routers/categories.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.models.categories import Category
from bakery.schemas.category import CategoryCreate, CategoryResponse

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
)

logger = logging.getLogger("app")


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return db.query(Category).order_by(Category.name.asc()).all()


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    if db.query(Category).filter(Category.name == category_data.name).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Category with this name already exists",
        )

    try:
        category = Category(**category_data.model_dump())
        db.add(category)
        db.commit()
        db.refresh(category)

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create category", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create category")

    return category
