"""User persistence (users table), optionally scoped to one role."""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Type

from sqlalchemy import case, func, insert, or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.models.user import User, UserCreate, UserPatch
from src.services import auth
from src.services.database import fetch_all, fetch_one, transaction, translate_error
from src.services.schema import user_sessions, users
from src.services.update_builder import apply_patch, require_identity
from src.utils.logging import mask_email

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = [
    users.c.id,
    users.c.name,
    users.c.email,
    users.c.phone,
    users.c.address,
    users.c.role,
    users.c.is_active,
    users.c.last_login,
    users.c.created_at,
    users.c.updated_at,
]


def to_user(row: Optional[Mapping[str, Any]]) -> Optional[dict]:
    """Public representation of a users row (no password hash)."""
    if row is None:
        return None
    return User.model_validate(dict(row)).model_dump()


class UserRepository:
    """
    CRUD over the users table.

    With ``role`` set, every read and write is narrowed to rows of that role,
    so a row of another role behaves exactly like a missing one.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        role: Optional[str] = None,
        entity: str = "User",
        patch_model: Type[UserPatch] = UserPatch,
    ):
        self.engine = engine
        self.role = role
        self.entity = entity
        self.patch_model = patch_model

    def _scope(self) -> list:
        return [users.c.role == self.role] if self.role else []

    def _public_select(self):
        return select(*PUBLIC_COLUMNS).where(*self._scope())

    def list_active(self) -> list[dict]:
        """Active users in scope, by name."""
        statement = (
            self._public_select()
            .where(users.c.is_active.is_(True))
            .order_by(users.c.name, users.c.id)
        )
        try:
            return [to_user(row) for row in fetch_all(statement, self.engine)]
        except SQLAlchemyError as e:
            raise translate_error(e, f"list {self.entity.lower()}s")

    def get_by_id(self, user_id: int, include_inactive: bool = False) -> Optional[dict]:
        """One user in scope; inactive users are hidden unless asked for."""
        require_identity(user_id)
        statement = self._public_select().where(users.c.id == user_id)
        if not include_inactive:
            statement = statement.where(users.c.is_active.is_(True))
        try:
            return to_user(fetch_one(statement, self.engine))
        except SQLAlchemyError as e:
            raise translate_error(e, f"fetch {self.entity.lower()}")

    def get_by_email(self, email: str) -> Optional[dict]:
        """Full row including password_hash. Internal use only (login)."""
        statement = select(users).where(users.c.email == email, *self._scope())
        try:
            return fetch_one(statement, self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "fetch user by email")

    def create(self, data: UserCreate) -> dict:
        """Insert a user with a hashed password; returns the stored record."""
        values = {
            "name": data.name,
            "email": data.email,
            "phone": data.phone,
            "address": data.address,
            "role": data.role.value if hasattr(data.role, "value") else data.role,
            "password_hash": auth.hash_password(data.password),
        }
        return self.insert_row(values)

    def insert_row(self, values: dict) -> dict:
        """Insert prepared column values; returns the stored record."""
        try:
            with transaction(self.engine) as conn:
                result = conn.execute(insert(users).values(**values))
                user_id = result.inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise translate_error(e, f"create {self.entity.lower()}")

        logger.info(
            f"{self.entity} created",
            extra={"user_id": user_id, "email": mask_email(values.get("email")), "role": values.get("role")}
        )
        return self.get_by_id(user_id, include_inactive=True)

    def update(self, user_id: int, fields: Any) -> Optional[dict]:
        """Apply a partial update; None when the user is not in scope."""
        try:
            with transaction(self.engine) as conn:
                matched = apply_patch(conn, users, user_id, self.patch_model, fields, *self._scope())
        except SQLAlchemyError as e:
            raise translate_error(e, f"update {self.entity.lower()}")

        if matched == 0:
            return None
        return self.get_by_id(user_id, include_inactive=True)

    def _set_active(self, user_id: int, active: bool) -> bool:
        require_identity(user_id)
        statement = (
            update(users)
            .where(users.c.id == user_id, *self._scope())
            .values(is_active=active, updated_at=func.now())
        )
        try:
            with transaction(self.engine) as conn:
                matched = conn.execute(statement).rowcount
        except SQLAlchemyError as e:
            raise translate_error(e, f"update {self.entity.lower()} status")

        logger.info(
            f"{self.entity} {'activated' if active else 'deactivated'}",
            extra={"user_id": user_id, "matched": matched}
        )
        return matched > 0

    def deactivate(self, user_id: int) -> bool:
        """Soft delete. Deactivating an inactive user still reports success."""
        return self._set_active(user_id, False)

    def activate(self, user_id: int) -> bool:
        return self._set_active(user_id, True)

    def update_last_login(self, user_id: int) -> bool:
        require_identity(user_id)
        statement = (
            update(users)
            .where(users.c.id == user_id, *self._scope())
            .values(last_login=func.now())
        )
        try:
            with transaction(self.engine) as conn:
                return conn.execute(statement).rowcount > 0
        except SQLAlchemyError as e:
            raise translate_error(e, "update last login")

    def search(self, term: str) -> list[dict]:
        """Case-insensitive match on name, email or phone among active users."""
        term = term.strip()
        statement = (
            self._public_select()
            .where(
                users.c.is_active.is_(True),
                or_(
                    users.c.name.icontains(term, autoescape=True),
                    users.c.email.icontains(term, autoescape=True),
                    users.c.phone.icontains(term, autoescape=True),
                ),
            )
            .order_by(users.c.name)
        )
        try:
            return [to_user(row) for row in fetch_all(statement, self.engine)]
        except SQLAlchemyError as e:
            raise translate_error(e, f"search {self.entity.lower()}s")

    def counts(self) -> dict:
        """Total, active and inactive counts in scope."""
        statement = select(
            func.count(users.c.id).label("total"),
            func.count(case((users.c.is_active.is_(True), 1))).label("active"),
        ).where(*self._scope())
        try:
            row = fetch_one(statement, self.engine) or {}
        except SQLAlchemyError as e:
            raise translate_error(e, f"compute {self.entity.lower()} stats")

        total = int(row.get("total") or 0)
        active = int(row.get("active") or 0)
        return {"total": total, "active": active, "inactive": total - active}

    def stats(self) -> dict:
        counts = self.counts()
        return {
            "total_users": counts["total"],
            "active_users": counts["active"],
            "inactive_users": counts["inactive"],
        }

    def record_session(
        self,
        user_id: int,
        expires_at: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        session_data: Optional[dict] = None,
    ) -> int:
        """Store a login session row; returns its id."""
        statement = insert(user_sessions).values(
            user_id=user_id,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
            session_data=session_data,
        )
        try:
            with transaction(self.engine) as conn:
                return conn.execute(statement).inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise translate_error(e, "record session")
