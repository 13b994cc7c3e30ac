from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import SQLAlchemyError
import logging

from bakery.database import get_db
from bakery.models.users import User
from bakery.schemas.user import UserCreate, UserResponse
from bakery.core.auth import get_current_user
from bakery.core.hashing import hash_password, verify_password
from bakery.core.jwt import create_access_token
from bakery.core.rate_limiter import limiter

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

logger = logging.getLogger("app")

COMMON_PASSWORDS = {
    "password",
    "password123",
    "12345678",
    "qwerty123",
    "admin123",
}


# ---------------- REGISTER ----------------
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
def register(request: Request, user_data: UserCreate, db: Session = Depends(get_db)):
    if user_data.password.lower() in COMMON_PASSWORDS:
        raise HTTPException(
            status_code=400,
            detail="Password is too common. Please choose a stronger password.",
        )

    if user_data.password.isdigit():
        raise HTTPException(
            status_code=400,
            detail="Password cannot be numbers only.",
        )

    if db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=409, detail="Email already exists")

    # The first account on a fresh install administers the bakery
    is_first_user = db.query(User.id).first() is None

    try:
        user = User(
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            full_name=user_data.full_name,
            is_admin=is_first_user,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create user account", exc_info=True)
        raise HTTPException(status_code=500, detail="Unable to create account")

    return user


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login")
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == form_data.username).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    token = create_access_token(user)

    return {
        "access_token": token,
        "token_type": "bearer"
    }


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
