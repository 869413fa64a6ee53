"""Tests for property models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.models.property import PropertyCreate, PropertyPatch


@pytest.mark.unit
def test_property_create_valid():
    """Test valid property with defaults."""
    prop = PropertyCreate(title="Lote Norte", location="Pachuca", size="500 m2", price="125000.50")

    assert prop.price == Decimal("125000.50")
    assert prop.property_type == "land"
    assert prop.features == []
    assert prop.images == []
    assert prop.seller_id is None


@pytest.mark.unit
def test_property_create_drops_blank_features_and_images():
    prop = PropertyCreate(
        title="Lote",
        location="Leon",
        size="300 m2",
        price=1000,
        features=["Agua", " ", "Luz "],
        images=["", "https://img.test/a.jpg"],
    )

    assert prop.features == ["Agua", "Luz"]
    assert prop.images == ["https://img.test/a.jpg"]


@pytest.mark.unit
@pytest.mark.parametrize("price", [0, -10, "abc"])
def test_property_create_rejects_invalid_price(price):
    with pytest.raises(ValidationError):
        PropertyCreate(title="Lote", location="Leon", size="300 m2", price=price)


@pytest.mark.unit
def test_property_create_requires_title():
    with pytest.raises(ValidationError):
        PropertyCreate(title="   ", location="Leon", size="300 m2", price=100)


@pytest.mark.unit
def test_property_patch_has_no_status():
    """Test status cannot be set through a property patch."""
    patch = PropertyPatch.model_validate({"status": "sold", "price": "99.90"})

    assert patch.model_dump(exclude_unset=True) == {"price": Decimal("99.90")}
    assert "status" not in PropertyPatch.model_fields


@pytest.mark.unit
def test_property_patch_rejects_null_title():
    with pytest.raises(ValidationError):
        PropertyPatch.model_validate({"title": None})


@pytest.mark.unit
def test_property_patch_checks_coordinates():
    with pytest.raises(ValidationError):
        PropertyPatch.model_validate({"latitude": 123})
