"""Property (land/house listing) models."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.models.common import PatchModel, blank_to_none, require_text


class PropertyStatus(str, Enum):
    """Listing status. Only a recorded sale moves a property to SOLD."""
    AVAILABLE = "available"
    SOLD = "sold"


class PropertyCreate(BaseModel):
    """Payload for POST /api/properties."""
    title: str = Field(..., max_length=200)
    location: str = Field(..., max_length=200)
    size: str = Field(..., max_length=50)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = None
    property_type: str = Field(default="land", description="land, house, ...")
    seller_id: Optional[int] = Field(None, gt=0)
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)
    features: list[str] = Field(default_factory=list, description="Feature tags, e.g. Agua, Luz")
    images: list[str] = Field(default_factory=list, description="Image URLs; the first one is primary")

    @field_validator("title", "location", "size", mode="before")
    @classmethod
    def check_required(cls, value):
        return require_text(value)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)

    @field_validator("features", "images")
    @classmethod
    def drop_blank_entries(cls, values: list[str]) -> list[str]:
        return [value.strip() for value in values if value and value.strip()]


class PropertyPatch(PatchModel):
    """Mutable property fields. Status is not here: only a sale changes it."""
    title: Optional[str] = None
    location: Optional[str] = None
    size: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = None
    property_type: Optional[str] = None
    seller_id: Optional[int] = Field(None, gt=0)
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)

    @field_validator("title", "location", "size", "property_type", "price", mode="before")
    @classmethod
    def check_required(cls, value):
        return require_text(value)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)
