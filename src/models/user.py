"""User models - users table, which also holds sellers (role = seller)."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import PatchModel, blank_to_none, require_text, validate_email


class Role(str, Enum):
    """User roles."""
    ADMIN = "admin"
    SELLER = "seller"
    USER = "user"


class User(BaseModel):
    """Public view of a users row; password_hash is never part of it."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: str = Field(default=Role.USER.value, description="admin, seller or user")
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserCreate(BaseModel):
    """Payload for POST /api/users."""
    name: str
    email: str
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Role = Role.USER

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return require_text(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value)

    @field_validator("phone", "address", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)


class SellerCreate(BaseModel):
    """Payload for POST /api/sellers."""
    name: str = Field(..., min_length=2)
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    password: Optional[str] = Field(None, description="Sellers without a password cannot log in")

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return require_text(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value)

    @field_validator("phone", "address", "password", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)


class UserPatch(PatchModel):
    """Mutable user fields. Role, password and timestamps are not updatable here."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return require_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value):
        if value is None:
            raise ValueError("must not be empty")
        return validate_email(value)

    @field_validator("phone", "address", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)


class SellerPatch(UserPatch):
    """Mutable seller fields (same allow-list as users)."""

    @field_validator("name")
    @classmethod
    def check_name_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value


class LoginRequest(BaseModel):
    """Payload for POST /api/auth/login."""
    email: str
    password: str

    @field_validator("email", "password", mode="before")
    @classmethod
    def check_present(cls, value):
        return require_text(value)
