"""Tests for /api/sales, including the sell-a-property workflow."""

import pytest

from api.properties import handler as properties_handler
from api.sales import handler
from tests.utils.assertions import assert_failure, assert_success
from tests.utils.factories import create_sale_data
from tests.utils.helpers import call_handler


@pytest.mark.unit
def test_sale_marks_property_sold(db_engine, available_property, sale_payload):
    sale = assert_success(call_handler(handler, "POST", "/api/sales", sale_payload), 201)

    assert sale["property_id"] == available_property["id"]
    assert sale["property_title"] == available_property["title"]
    prop = assert_success(call_handler(properties_handler, "GET", f"/api/properties/{available_property['id']}"))
    assert prop["status"] == "sold"


@pytest.mark.unit
def test_second_sale_is_conflict(db_engine, available_property, seller, sale_payload):
    call_handler(handler, "POST", "/api/sales", sale_payload)

    again = create_sale_data(property_id=available_property["id"], seller_id=seller["id"])
    response = call_handler(handler, "POST", "/api/sales", again)

    assert_failure(response, 409, error_contains="already sold")
    assert call_handler(handler, "GET", "/api/sales").body["count"] == 1


@pytest.mark.unit
def test_sale_for_missing_property(db_engine, seller):
    response = call_handler(handler, "POST", "/api/sales", create_sale_data(property_id=777, seller_id=seller["id"]))

    assert_failure(response, 404, error_contains="Property not found")


@pytest.mark.unit
def test_sale_validation(db_engine, sale_payload):
    sale_payload["sale_amount"] = "-5"

    body = assert_failure(call_handler(handler, "POST", "/api/sales", sale_payload), 400)

    assert "sale_amount" in body["error"]


@pytest.mark.unit
def test_get_update_delete_sale(db_engine, available_property, sale_payload):
    sale = assert_success(call_handler(handler, "POST", "/api/sales", sale_payload), 201)
    path = f"/api/sales/{sale['id']}"

    updated = assert_success(call_handler(handler, "PUT", path, {"buyer_name": "Ana Ruiz", "property_id": 99}))
    assert updated["buyer_name"] == "Ana Ruiz"
    assert updated["property_id"] == available_property["id"]

    assert_success(call_handler(handler, "DELETE", path))
    assert_failure(call_handler(handler, "GET", path), 404)
    prop = assert_success(call_handler(properties_handler, "GET", f"/api/properties/{available_property['id']}"))
    assert prop["status"] == "sold"


@pytest.mark.unit
def test_sales_by_seller(db_engine, seller, sale_payload):
    call_handler(handler, "POST", "/api/sales", sale_payload)

    assert call_handler(handler, "GET", f"/api/sales/seller/{seller['id']}").body["count"] == 1
    assert call_handler(handler, "GET", "/api/sales/seller/4040").body["count"] == 0


@pytest.mark.unit
def test_stats_and_trends(db_engine, sale_payload):
    call_handler(handler, "POST", "/api/sales", sale_payload)

    stats = assert_success(call_handler(handler, "GET", "/api/sales/stats?period=month"))
    assert stats["total_sales"] == 1
    assert stats["total_revenue"] == 150000.0
    assert stats["active_sellers"] == 1

    assert_failure(call_handler(handler, "GET", "/api/sales/stats?period=decade"), 400, error_contains="period")

    trends = assert_success(call_handler(handler, "GET", "/api/sales/trends"))
    assert sum(row["sales_count"] for row in trends) == 1
