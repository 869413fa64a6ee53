"""Contact (lead) persistence."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.models.contact import ContactCreate, ContactPatch, ContactStatus
from src.services.database import fetch_all, fetch_one, store_now, transaction, translate_error
from src.services.schema import contacts, properties
from src.services.update_builder import apply_patch, require_identity
from src.utils.errors import InputValidationError, NotFoundError
from src.utils.logging import mask_email, sanitize_message_text

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


def _with_property():
    """contacts LEFT JOIN properties with the listing's headline columns."""
    return (
        select(
            contacts,
            properties.c.title.label("property_title"),
            properties.c.location.label("property_location"),
            properties.c.price.label("property_price"),
        )
        .select_from(contacts.outerjoin(properties, contacts.c.property_id == properties.c.id))
        .order_by(contacts.c.created_at.desc(), contacts.c.id.desc())
    )


class ContactRepository:
    """CRUD and queries over contacts. Deletes are hard deletes."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine

    def _query(self, *criteria, limit: Optional[int] = None, action: str = "list contacts") -> list[dict]:
        statement = _with_property().where(*criteria)
        if limit is not None:
            statement = statement.limit(limit)
        try:
            return fetch_all(statement, self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, action)

    def list_all(self) -> list[dict]:
        return self._query()

    def get_by_id(self, contact_id: int) -> Optional[dict]:
        require_identity(contact_id)
        try:
            return fetch_one(_with_property().where(contacts.c.id == contact_id), self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "fetch contact")

    def create(self, data: ContactCreate) -> dict:
        values = data.model_dump()
        values["status"] = ContactStatus.NEW.value
        try:
            with transaction(self.engine) as conn:
                contact_id = conn.execute(insert(contacts).values(**values)).inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise translate_error(e, "create contact")

        logger.info(
            "Contact created",
            extra={
                "contact_id": contact_id,
                "email": mask_email(data.email),
                "property_id": data.property_id,
                "contact_type": data.contact_type,
                "message_preview": sanitize_message_text(data.message, max_length=120),
            }
        )
        return self.get_by_id(contact_id)

    def update(self, contact_id: int, fields: Any) -> Optional[dict]:
        try:
            with transaction(self.engine) as conn:
                matched = apply_patch(conn, contacts, contact_id, ContactPatch, fields)
        except SQLAlchemyError as e:
            raise translate_error(e, "update contact")

        if matched == 0:
            return None
        return self.get_by_id(contact_id)

    def update_status(self, contact_id: int, status: ContactStatus) -> Optional[dict]:
        """Set the lead status. Any status may follow any other."""
        require_identity(contact_id)
        status_value = status.value if isinstance(status, ContactStatus) else ContactStatus(status).value
        try:
            with transaction(self.engine) as conn:
                matched = conn.execute(
                    update(contacts).where(contacts.c.id == contact_id).values(status=status_value)
                ).rowcount
        except SQLAlchemyError as e:
            raise translate_error(e, "update contact status")

        if matched == 0:
            return None
        logger.info("Contact status changed", extra={"contact_id": contact_id, "status": status_value})
        return self.get_by_id(contact_id)

    def delete(self, contact_id: int) -> None:
        require_identity(contact_id)
        try:
            with transaction(self.engine) as conn:
                deleted = conn.execute(contacts.delete().where(contacts.c.id == contact_id)).rowcount
                if deleted == 0:
                    raise NotFoundError("Contact", contact_id)
        except SQLAlchemyError as e:
            raise translate_error(e, "delete contact")

        logger.info("Contact deleted", extra={"contact_id": contact_id})

    def list_by_status(self, status: str) -> list[dict]:
        try:
            status_value = ContactStatus(status).value
        except ValueError:
            raise InputValidationError(f"Invalid contact status: {status}")
        return self._query(contacts.c.status == status_value, action="list contacts by status")

    def list_by_type(self, contact_type: str) -> list[dict]:
        return self._query(contacts.c.contact_type == contact_type, action="list contacts by type")

    def search(self, term: str) -> list[dict]:
        """Case-insensitive match on name, email, phone or message."""
        term = term.strip()
        return self._query(
            or_(
                contacts.c.name.icontains(term, autoescape=True),
                contacts.c.email.icontains(term, autoescape=True),
                contacts.c.phone.icontains(term, autoescape=True),
                contacts.c.message.icontains(term, autoescape=True),
            ),
            action="search contacts",
        )

    def recent(self, limit: int = 10, now: Optional[datetime] = None) -> list[dict]:
        """Contacts created in the last week, newest first."""
        if limit <= 0:
            raise InputValidationError("limit must be a positive integer")
        try:
            now = now or store_now(self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "list recent contacts")
        cutoff = now - timedelta(days=RECENT_DAYS)
        return self._query(contacts.c.created_at >= cutoff, limit=limit, action="list recent contacts")

    def by_date_range(self, start: date, end: date) -> list[dict]:
        """Contacts created on any day from start to end, both inclusive."""
        if end < start:
            raise InputValidationError("end date must not be before start date")
        lower = datetime.combine(start, time.min)
        upper = datetime.combine(end + timedelta(days=1), time.min)
        return self._query(
            contacts.c.created_at >= lower,
            contacts.c.created_at < upper,
            action="list contacts by date range",
        )

    def stats(self) -> dict:
        """Total, new, and counts per status and per contact type."""
        try:
            by_status = fetch_all(
                select(contacts.c.status, func.count(contacts.c.id).label("count"))
                .group_by(contacts.c.status)
                .order_by(contacts.c.status),
                self.engine,
            )
            by_type = fetch_all(
                select(contacts.c.contact_type, func.count(contacts.c.id).label("count"))
                .group_by(contacts.c.contact_type)
                .order_by(contacts.c.contact_type),
                self.engine,
            )
        except SQLAlchemyError as e:
            raise translate_error(e, "compute contact stats")

        status_counts = {row["status"]: row["count"] for row in by_status}
        return {
            "total": sum(status_counts.values()),
            "new": status_counts.get(ContactStatus.NEW.value, 0),
            "by_status": by_status,
            "by_type": by_type,
        }
