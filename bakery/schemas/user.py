from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    full_name: str | None = Field(None, max_length=200)


class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: str | None
    is_admin: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
