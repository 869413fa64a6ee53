"""Custom assertion helpers."""

from typing import Any, Dict, Optional

from tests.utils.helpers import HandlerResponse


def assert_success(response: HandlerResponse, expected_status: int = 200) -> Any:
    """Assert a success envelope and return its data."""
    assert response.status == expected_status, response.body
    assert response.headers.get("Content-Type", "").startswith("application/json")
    assert response.body["success"] is True
    return response.body.get("data")


def assert_failure(response: HandlerResponse, expected_status: int, error_contains: Optional[str] = None) -> Dict[str, Any]:
    """Assert a failure envelope with a human-readable error."""
    assert response.status == expected_status, response.body
    assert response.body["success"] is False
    assert isinstance(response.body["error"], str) and response.body["error"]
    if error_contains:
        assert error_contains.lower() in response.body["error"].lower(), response.body["error"]
    return response.body


def assert_public_user(user: Dict[str, Any]) -> None:
    """Assert a user record is safe to return to callers."""
    assert "password_hash" not in user
    assert "id" in user and "email" in user and "role" in user
