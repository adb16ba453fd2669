# jobboard/models/user.py
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 4

# never leave the service layer
PRIVATE_USER_FIELDS = ("password", "reset_password_token", "reset_password_expire")


class Role(str, Enum):
    USER = "user"
    EMPLOYER = "employer"
    ADMIN = "admin"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: Role
    mobile_no: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None


class RegisterForm(UserCreate):
    """Self-service registration; admin accounts are provisioned by the operator."""

    @field_validator("role")
    @classmethod
    def public_role(cls, v):
        if Role(v) == Role.ADMIN:
            raise ValueError("role must be 'user' or 'employer'")
        return v


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UpdateDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    mobile_no: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None


class UpdatePassword(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class ForgotPassword(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr


class ResetPassword(BaseModel):
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class ApprovalRequest(BaseModel):
    is_approved: bool


def sanitize_user(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return {k: v for k, v in doc.items() if k not in PRIVATE_USER_FIELDS}
