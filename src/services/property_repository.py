"""Property persistence with features, images and seller details."""

import logging
from collections import defaultdict
from typing import Any, Iterable, Optional

from sqlalchemy import func, insert, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.models.property import PropertyCreate, PropertyPatch, PropertyStatus
from src.services.database import fetch_all, fetch_one, transaction, translate_error
from src.services.schema import properties, property_features, property_images, sales, users
from src.services.update_builder import apply_patch, require_identity
from src.utils.errors import NotFoundError, PropertyHasSalesError

logger = logging.getLogger(__name__)


def _with_seller():
    """properties LEFT JOIN users (the seller) with seller contact columns."""
    return (
        select(
            properties,
            users.c.name.label("seller_name"),
            users.c.email.label("seller_email"),
            users.c.phone.label("seller_phone"),
        )
        .select_from(properties.outerjoin(users, properties.c.seller_id == users.c.id))
    )


class PropertyRepository:
    """CRUD and queries over properties and their child rows."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine

    def _features_for(self, property_ids: Iterable[int]) -> dict[int, list[str]]:
        ids = list(property_ids)
        if not ids:
            return {}
        statement = (
            select(property_features.c.property_id, property_features.c.feature)
            .where(property_features.c.property_id.in_(ids))
            .order_by(property_features.c.id)
        )
        grouped: dict[int, list[str]] = defaultdict(list)
        for row in fetch_all(statement, self.engine):
            grouped[row["property_id"]].append(row["feature"])
        return grouped

    def _attach_features(self, rows: list[dict]) -> list[dict]:
        features = self._features_for(row["id"] for row in rows)
        for row in rows:
            row["features"] = features.get(row["id"], [])
        return rows

    def _listing(self, *criteria) -> list[dict]:
        primary_image = (
            select(property_images.c.image_url)
            .where(
                property_images.c.property_id == properties.c.id,
                property_images.c.is_primary.is_(True),
            )
            .order_by(property_images.c.id)
            .limit(1)
            .scalar_subquery()
        )
        statement = (
            _with_seller()
            .add_columns(primary_image.label("primary_image"))
            .where(*criteria)
            .order_by(properties.c.created_at.desc(), properties.c.id.desc())
        )
        return self._attach_features(fetch_all(statement, self.engine))

    def list_all(self, include_sold: bool = False) -> list[dict]:
        """Available properties (all of them with include_sold), newest first."""
        criteria = [] if include_sold else [properties.c.status == PropertyStatus.AVAILABLE.value]
        try:
            return self._listing(*criteria)
        except SQLAlchemyError as e:
            raise translate_error(e, "list properties")

    def list_by_seller(self, seller_id: int) -> list[dict]:
        require_identity(seller_id)
        try:
            return self._listing(properties.c.seller_id == seller_id)
        except SQLAlchemyError as e:
            raise translate_error(e, "list seller properties")

    def get_by_id(self, property_id: int) -> Optional[dict]:
        """Property with seller contact, feature strings and image list."""
        require_identity(property_id)
        try:
            row = fetch_one(_with_seller().where(properties.c.id == property_id), self.engine)
            if row is None:
                return None

            row["features"] = self._features_for([property_id]).get(property_id, [])
            images = select(property_images.c.image_url, property_images.c.is_primary).where(
                property_images.c.property_id == property_id
            ).order_by(property_images.c.id)
            row["images"] = [
                {"image_url": image["image_url"], "is_primary": bool(image["is_primary"])}
                for image in fetch_all(images, self.engine)
            ]
            return row
        except SQLAlchemyError as e:
            raise translate_error(e, "fetch property")

    def create(self, data: PropertyCreate) -> dict:
        """Insert the property with its features and images in one transaction."""
        values = data.model_dump(exclude={"features", "images"})
        try:
            with transaction(self.engine) as conn:
                property_id = conn.execute(insert(properties).values(**values)).inserted_primary_key[0]

                if data.features:
                    conn.execute(
                        insert(property_features),
                        [{"property_id": property_id, "feature": feature} for feature in data.features],
                    )
                if data.images:
                    conn.execute(
                        insert(property_images),
                        [
                            {"property_id": property_id, "image_url": url, "is_primary": index == 0}
                            for index, url in enumerate(data.images)
                        ],
                    )
        except SQLAlchemyError as e:
            raise translate_error(e, "create property")

        logger.info(
            "Property created",
            extra={"property_id": property_id, "features": len(data.features), "images": len(data.images)}
        )
        return self.get_by_id(property_id)

    def update(self, property_id: int, fields: Any) -> Optional[dict]:
        """Partial update; status is not among the writable fields."""
        try:
            with transaction(self.engine) as conn:
                matched = apply_patch(conn, properties, property_id, PropertyPatch, fields)
        except SQLAlchemyError as e:
            raise translate_error(e, "update property")

        if matched == 0:
            return None
        return self.get_by_id(property_id)

    def delete(self, property_id: int) -> None:
        """
        Hard delete. Refused while sales reference the property; features and
        images go with it, contacts keep their row with property_id cleared.
        """
        require_identity(property_id)
        try:
            with transaction(self.engine) as conn:
                sales_count = conn.execute(
                    select(func.count(sales.c.id)).where(sales.c.property_id == property_id)
                ).scalar_one()
                if sales_count:
                    raise PropertyHasSalesError(property_id, sales_count)

                deleted = conn.execute(
                    properties.delete().where(properties.c.id == property_id)
                ).rowcount
                if deleted == 0:
                    raise NotFoundError("Property", property_id)
        except SQLAlchemyError as e:
            raise translate_error(e, "delete property")

        logger.info("Property deleted", extra={"property_id": property_id})

    def search(self, term: str) -> list[dict]:
        """Case-insensitive match on title, location or description."""
        term = term.strip()
        try:
            return self._listing(
                or_(
                    properties.c.title.icontains(term, autoescape=True),
                    properties.c.location.icontains(term, autoescape=True),
                    properties.c.description.icontains(term, autoescape=True),
                )
            )
        except SQLAlchemyError as e:
            raise translate_error(e, "search properties")

    def stats(self) -> dict:
        """Totals plus counts grouped by status and by property type."""
        try:
            by_status = fetch_all(
                select(properties.c.status, func.count(properties.c.id).label("count"))
                .group_by(properties.c.status)
                .order_by(properties.c.status),
                self.engine,
            )
            by_type = fetch_all(
                select(properties.c.property_type, func.count(properties.c.id).label("count"))
                .group_by(properties.c.property_type)
                .order_by(properties.c.property_type),
                self.engine,
            )
        except SQLAlchemyError as e:
            raise translate_error(e, "compute property stats")

        status_counts = {row["status"]: row["count"] for row in by_status}
        return {
            "total": sum(status_counts.values()),
            "available": status_counts.get(PropertyStatus.AVAILABLE.value, 0),
            "sold": status_counts.get(PropertyStatus.SOLD.value, 0),
            "by_status": by_status,
            "by_type": by_type,
        }
