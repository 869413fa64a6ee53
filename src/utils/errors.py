"""Error handling utilities."""

from typing import Optional


class TerraSaleError(Exception):
    """Base exception for TerraSale backend."""
    status_code = 500


class InputValidationError(TerraSaleError):
    """Missing or malformed request input."""
    status_code = 400


class NoFieldsToUpdate(TerraSaleError):
    """Partial update with nothing left to write after filtering."""
    status_code = 400

    def __init__(self, message: str = "No fields to update"):
        super().__init__(message)


class AuthenticationError(TerraSaleError):
    """Invalid credentials or token."""
    status_code = 401


class NotFoundError(TerraSaleError):
    """Entity does not exist (or is outside the caller's scope)."""
    status_code = 404

    def __init__(self, entity: str, identity: Optional[object] = None):
        self.entity = entity
        self.identity = identity
        super().__init__(f"{entity} not found")


class RouteNotFoundError(TerraSaleError):
    """No handler registered for the requested path."""
    status_code = 404

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Route {path} not found")


class DuplicateEntryError(TerraSaleError):
    """Unique constraint violation (email)."""
    status_code = 409


class DomainConflictError(TerraSaleError):
    """Business rule violation."""
    status_code = 409


class PropertyAlreadySoldError(DomainConflictError):
    """A sale was requested for a property that is already sold."""

    def __init__(self, property_id: int):
        self.property_id = property_id
        super().__init__(f"Property {property_id} is already sold")


class PropertyHasSalesError(DomainConflictError):
    """Property deletion refused because sales reference it."""
    status_code = 400

    def __init__(self, property_id: int, sales_count: int):
        self.property_id = property_id
        self.sales_count = sales_count
        super().__init__("Cannot delete property because it has associated sales")


class DatabaseError(TerraSaleError):
    """Relational store operation error."""
    status_code = 500


class ConfigurationError(TerraSaleError):
    """Required configuration is missing."""
    status_code = 500


class NotificationError(TerraSaleError):
    """Slack delivery failed."""
    status_code = 502
