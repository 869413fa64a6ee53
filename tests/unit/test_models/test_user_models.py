"""Tests for user and seller models."""

import pytest
from pydantic import ValidationError

from src.models.user import LoginRequest, Role, SellerCreate, SellerPatch, User, UserCreate, UserPatch


@pytest.mark.unit
def test_user_create_defaults_to_user_role():
    """Test role defaults to 'user' and optional blanks become None."""
    user = UserCreate(name="Ana Ruiz", email="ana@example.com", password="secret", phone="  ")

    assert user.role == Role.USER
    assert user.phone is None
    assert user.address is None


@pytest.mark.unit
def test_user_create_rejects_bad_email():
    with pytest.raises(ValidationError) as exc_info:
        UserCreate(name="Ana", email="not-an-email", password="secret")

    assert "Invalid email format" in str(exc_info.value)


@pytest.mark.unit
def test_user_create_rejects_unknown_role():
    with pytest.raises(ValidationError):
        UserCreate(name="Ana", email="ana@example.com", password="x", role="superuser")


@pytest.mark.unit
def test_user_record_never_exposes_password_hash():
    """Test the public user view drops password_hash."""
    record = User.model_validate({
        "id": 1,
        "name": "Ana",
        "email": "ana@example.com",
        "password_hash": "$2b$04$abc",
        "role": "seller",
        "is_active": 1,
    })

    dumped = record.model_dump()
    assert "password_hash" not in dumped
    assert dumped["is_active"] is True


@pytest.mark.unit
def test_seller_create_requires_two_character_name():
    with pytest.raises(ValidationError):
        SellerCreate(name="A", email="a@example.com")


@pytest.mark.unit
def test_seller_create_password_optional():
    seller = SellerCreate(name="Carlos", email="carlos@example.com", password="")

    assert seller.password is None


@pytest.mark.unit
def test_user_patch_drops_fields_outside_allow_list():
    """Test role, password_hash and timestamps never reach the patch."""
    patch = UserPatch.model_validate({
        "name": "New Name",
        "role": "admin",
        "password_hash": "x",
        "created_at": "2024-01-01",
    })

    assert patch.model_dump(exclude_unset=True) == {"name": "New Name"}


@pytest.mark.unit
def test_user_patch_rejects_null_email():
    with pytest.raises(ValidationError):
        UserPatch.model_validate({"email": None})


@pytest.mark.unit
def test_user_patch_clears_optional_text_with_empty_string():
    patch = UserPatch.model_validate({"phone": "", "address": ""})

    assert patch.model_dump(exclude_unset=True) == {"phone": None, "address": None}


@pytest.mark.unit
def test_seller_patch_enforces_name_length():
    with pytest.raises(ValidationError):
        SellerPatch.model_validate({"name": "X"})

    assert SellerPatch.model_validate({"name": "Xi"}).name == "Xi"


@pytest.mark.unit
def test_login_request_requires_both_fields():
    with pytest.raises(ValidationError):
        LoginRequest.model_validate({"email": "ana@example.com"})

    with pytest.raises(ValidationError):
        LoginRequest.model_validate({"email": "", "password": "secret"})
