"""Contact / lead models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.models.common import PatchModel, blank_to_none, require_text, validate_email


class ContactStatus(str, Enum):
    """Lead status. Any status may follow any other."""
    NEW = "new"
    CONTACTED = "contacted"
    RESPONDED = "responded"
    CLOSED = "closed"
    REJECTED = "rejected"


class ContactCreate(BaseModel):
    """Payload for POST /api/contacts."""
    name: str = Field(..., max_length=100)
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    property_id: Optional[int] = Field(None, gt=0)
    contact_type: str = Field(default="general", description="general, visit, financing, ...")

    @field_validator("name", "email", mode="before")
    @classmethod
    def check_required(cls, value):
        return require_text(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value)

    @field_validator("phone", "message", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)

    @field_validator("property_id", mode="before")
    @classmethod
    def normalize_property(cls, value):
        # Forms send "" or 0 for "no property"
        return value or None

    @field_validator("contact_type", mode="before")
    @classmethod
    def default_type(cls, value):
        return blank_to_none(value) or "general"


class ContactPatch(PatchModel):
    """Mutable contact fields."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    property_id: Optional[int] = Field(None, gt=0)
    contact_type: Optional[str] = None
    status: Optional[ContactStatus] = None

    @field_validator("name", "email", "contact_type", "status", mode="before")
    @classmethod
    def check_required(cls, value):
        return require_text(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value)

    @field_validator("phone", "message", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)

    @field_validator("property_id", mode="before")
    @classmethod
    def normalize_property(cls, value):
        return value or None


class ContactStatusUpdate(BaseModel):
    """Payload for PATCH /api/contacts/{id}/status."""
    status: ContactStatus

    @field_validator("status", mode="before")
    @classmethod
    def check_present(cls, value):
        return require_text(value)
