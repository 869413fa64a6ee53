"""Seller persistence: users with role = 'seller'."""

import logging
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.models.user import Role, SellerCreate, SellerPatch
from src.services import auth
from src.services.database import fetch_all, transaction, translate_error
from src.services.schema import properties, users
from src.services.update_builder import require_identity
from src.services.user_repository import UserRepository

logger = logging.getLogger(__name__)


class SellerRepository:
    """Seller operations over a role-scoped UserRepository."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine
        self.users = UserRepository(
            engine,
            role=Role.SELLER.value,
            entity="Seller",
            patch_model=SellerPatch,
        )

    def list_active(self) -> list[dict]:
        return self.users.list_active()

    def get_by_id(self, seller_id: int) -> Optional[dict]:
        return self.users.get_by_id(seller_id)

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.users.get_by_email(email)

    def create(self, data: SellerCreate) -> dict:
        """Insert a seller. The role is always seller; the password is optional."""
        values = {
            "name": data.name,
            "email": data.email,
            "phone": data.phone,
            "address": data.address,
            "role": Role.SELLER.value,
            "password_hash": auth.hash_password(data.password) if data.password else None,
        }
        return self.users.insert_row(values)

    def update(self, seller_id: int, fields: Any) -> Optional[dict]:
        """Partial update; role is never writable through here."""
        return self.users.update(seller_id, fields)

    def deactivate(self, seller_id: int) -> bool:
        return self.users.deactivate(seller_id)

    def activate(self, seller_id: int) -> bool:
        return self.users.activate(seller_id)

    def search(self, term: str) -> list[dict]:
        return self.users.search(term)

    def stats(self) -> dict:
        counts = self.users.counts()
        return {
            "total_sellers": counts["total"],
            "active_sellers": counts["active"],
            "inactive_sellers": counts["inactive"],
        }

    def convert_to_seller(self, user_id: int) -> bool:
        """Give an existing user (of any role) the seller role."""
        require_identity(user_id)
        statement = (
            update(users)
            .where(users.c.id == user_id)
            .values(role=Role.SELLER.value, updated_at=func.now())
        )
        try:
            with transaction(self.engine) as conn:
                matched = conn.execute(statement).rowcount
        except SQLAlchemyError as e:
            raise translate_error(e, "convert user to seller")

        logger.info("User converted to seller", extra={"user_id": user_id, "matched": matched})
        return matched > 0

    def get_assigned_properties(self, seller_id: int) -> list[dict]:
        """Properties whose seller_id points at this seller, newest first."""
        require_identity(seller_id)
        statement = (
            select(
                properties.c.id,
                properties.c.title,
                properties.c.location,
                properties.c.price,
                properties.c.status,
                properties.c.property_type,
                properties.c.size,
                properties.c.created_at,
            )
            .where(properties.c.seller_id == seller_id)
            .order_by(properties.c.created_at.desc(), properties.c.id.desc())
        )
        try:
            return fetch_all(statement, self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "fetch seller properties")
