from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError
from typing import Optional
from datetime import datetime

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PasswordChange(BaseModel):
    password: Optional[str] = None
    password2: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    token: str
