"""Shared model helpers: patch base class and field validators."""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class PatchModel(BaseModel):
    """
    Base for partial-update payloads.

    Declared fields are the allow-list for the entity; any other key in the
    incoming mapping is dropped.
    """
    model_config = ConfigDict(extra="ignore", use_enum_values=True)


def blank_to_none(value: Any) -> Any:
    """Treat empty (or whitespace-only) strings as no value."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def require_text(value: Any) -> Any:
    """Reject missing or blank text for required fields."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("must not be empty")
    return value.strip() if isinstance(value, str) else value


def validate_email(value: Optional[str]) -> Optional[str]:
    """Check the loose user@host.tld shape used across the API."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Invalid email format")
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value
