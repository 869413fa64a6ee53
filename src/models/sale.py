"""Sale models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.models.common import PatchModel, blank_to_none, require_text, validate_email


class SalePeriod(str, Enum):
    """Window for sales statistics."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class SaleCreate(BaseModel):
    """Payload for POST /api/sales."""
    property_id: int = Field(..., gt=0)
    seller_id: int = Field(..., gt=0)
    buyer_name: str = Field(..., max_length=100)
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    sale_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    commission: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    sale_date: date
    status: str = Field(default="completed")

    @field_validator("buyer_name", mode="before")
    @classmethod
    def check_buyer(cls, value):
        return require_text(value)

    @field_validator("buyer_email", "buyer_phone", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)

    @field_validator("buyer_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value):
        return blank_to_none(value) or "completed"


class SalePatch(PatchModel):
    """Mutable sale fields: everything except the property reference."""
    seller_id: Optional[int] = Field(None, gt=0)
    buyer_name: Optional[str] = Field(None, max_length=100)
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    sale_amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    commission: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    sale_date: Optional[date] = None
    status: Optional[str] = None

    @field_validator("seller_id", "buyer_name", "sale_amount", "commission", "sale_date", "status", mode="before")
    @classmethod
    def check_required(cls, value):
        return require_text(value)

    @field_validator("buyer_email", "buyer_phone", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)

    @field_validator("buyer_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value)
