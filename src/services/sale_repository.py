"""Sale persistence and the sale-recording workflow."""

import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import extract, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.models.property import PropertyStatus
from src.models.sale import SaleCreate, SalePatch, SalePeriod
from src.services.database import fetch_all, fetch_one, transaction, translate_error
from src.services.schema import properties, sales, users
from src.services.update_builder import apply_patch, require_identity
from src.utils.errors import InputValidationError, NotFoundError, PropertyAlreadySoldError

logger = logging.getLogger(__name__)

TREND_MONTHS = 12


def months_before(day: date, months: int) -> date:
    """Same day-of-month ``months`` earlier, clamped to the month's length."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def period_start(period: SalePeriod, today: date) -> Optional[date]:
    """First sale_date included in a statistics window; None means no bound."""
    if period == SalePeriod.WEEK:
        return today - timedelta(weeks=1)
    if period == SalePeriod.MONTH:
        return months_before(today, 1)
    if period == SalePeriod.YEAR:
        return months_before(today, 12)
    return None


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value) if isinstance(value, (Decimal, float)) else value


def _joined():
    """sales LEFT JOIN property and seller with display columns."""
    return (
        select(
            sales,
            properties.c.title.label("property_title"),
            properties.c.location.label("property_location"),
            users.c.name.label("seller_name"),
            users.c.email.label("seller_email"),
        )
        .select_from(
            sales.outerjoin(properties, sales.c.property_id == properties.c.id)
            .outerjoin(users, sales.c.seller_id == users.c.id)
        )
        .order_by(sales.c.sale_date.desc(), sales.c.id.desc())
    )


class SaleRepository:
    """CRUD over sales plus the atomic record-sale workflow."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine

    def list_all(self) -> list[dict]:
        try:
            return fetch_all(_joined(), self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "list sales")

    def list_by_seller(self, seller_id: int) -> list[dict]:
        require_identity(seller_id)
        try:
            return fetch_all(_joined().where(sales.c.seller_id == seller_id), self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "list seller sales")

    def get_by_id(self, sale_id: int) -> Optional[dict]:
        require_identity(sale_id)
        try:
            return fetch_one(_joined().where(sales.c.id == sale_id), self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "fetch sale")

    def create(self, data: SaleCreate) -> dict:
        """
        Record a sale and mark its property sold, atomically.

        The property flip is conditional on the property still being
        available, so of two concurrent sales for one property exactly one
        commits. A missing property raises NotFoundError and an already sold
        one raises PropertyAlreadySoldError; in both cases the sale row is
        rolled back.
        """
        values = data.model_dump()
        try:
            with transaction(self.engine) as conn:
                exists = conn.execute(
                    select(properties.c.id).where(properties.c.id == data.property_id)
                ).first()
                if exists is None:
                    raise NotFoundError("Property", data.property_id)

                sale_id = conn.execute(insert(sales).values(**values)).inserted_primary_key[0]

                flipped = conn.execute(
                    update(properties)
                    .where(
                        properties.c.id == data.property_id,
                        properties.c.status == PropertyStatus.AVAILABLE.value,
                    )
                    .values(status=PropertyStatus.SOLD.value, updated_at=func.now())
                ).rowcount
                if flipped == 0:
                    raise PropertyAlreadySoldError(data.property_id)
        except SQLAlchemyError as e:
            raise translate_error(e, "create sale")

        logger.info(
            "Sale recorded",
            extra={
                "sale_id": sale_id,
                "property_id": data.property_id,
                "seller_id": data.seller_id,
                "sale_amount": str(data.sale_amount),
            }
        )
        return self.get_by_id(sale_id)

    def update(self, sale_id: int, fields: Any) -> Optional[dict]:
        """Partial update; the property reference cannot be changed."""
        try:
            with transaction(self.engine) as conn:
                matched = apply_patch(conn, sales, sale_id, SalePatch, fields)
        except SQLAlchemyError as e:
            raise translate_error(e, "update sale")

        if matched == 0:
            return None
        return self.get_by_id(sale_id)

    def delete(self, sale_id: int) -> None:
        """Hard delete. The property stays sold."""
        require_identity(sale_id)
        try:
            with transaction(self.engine) as conn:
                deleted = conn.execute(sales.delete().where(sales.c.id == sale_id)).rowcount
                if deleted == 0:
                    raise NotFoundError("Sale", sale_id)
        except SQLAlchemyError as e:
            raise translate_error(e, "delete sale")

        logger.info("Sale deleted", extra={"sale_id": sale_id})

    def stats(self, period: Any = SalePeriod.MONTH, today: Optional[date] = None) -> dict:
        """Aggregates over sales dated within the period (week, month, year or all)."""
        try:
            period = SalePeriod(period)
        except ValueError:
            raise InputValidationError(f"Invalid period: {period}")

        statement = select(
            func.count(sales.c.id).label("total_sales"),
            func.sum(sales.c.sale_amount).label("total_revenue"),
            func.sum(sales.c.commission).label("total_commission"),
            func.avg(sales.c.sale_amount).label("average_sale"),
            func.max(sales.c.sale_amount).label("highest_sale"),
            func.min(sales.c.sale_amount).label("lowest_sale"),
            func.count(sales.c.seller_id.distinct()).label("active_sellers"),
        )
        start = period_start(period, today or date.today())
        if start is not None:
            statement = statement.where(sales.c.sale_date >= start)

        try:
            row = fetch_one(statement, self.engine) or {}
        except SQLAlchemyError as e:
            raise translate_error(e, "compute sale stats")

        return {
            "period": period.value,
            "total_sales": int(row.get("total_sales") or 0),
            "total_revenue": _number(row.get("total_revenue")) or 0.0,
            "total_commission": _number(row.get("total_commission")) or 0.0,
            "average_sale": _number(row.get("average_sale")),
            "highest_sale": _number(row.get("highest_sale")),
            "lowest_sale": _number(row.get("lowest_sale")),
            "active_sellers": int(row.get("active_sellers") or 0),
        }

    def monthly_trends(self, today: Optional[date] = None) -> list[dict]:
        """Count, revenue and commission per calendar month over the last year."""
        start = months_before(today or date.today(), TREND_MONTHS)
        year = extract("year", sales.c.sale_date).label("year")
        month = extract("month", sales.c.sale_date).label("month")
        statement = (
            select(
                year,
                month,
                func.count(sales.c.id).label("sales_count"),
                func.sum(sales.c.sale_amount).label("total_amount"),
                func.sum(sales.c.commission).label("total_commission"),
            )
            .where(sales.c.sale_date >= start)
            .group_by(year, month)
            .order_by(year, month)
        )
        try:
            rows = fetch_all(statement, self.engine)
        except SQLAlchemyError as e:
            raise translate_error(e, "compute monthly trends")

        return [
            {
                "month": f"{int(row['year']):04d}-{int(row['month']):02d}",
                "sales_count": int(row["sales_count"]),
                "total_amount": _number(row["total_amount"]) or 0.0,
                "total_commission": _number(row["total_commission"]) or 0.0,
            }
            for row in rows
        ]
