"""Tests for /api/properties."""

from urllib.parse import quote

import pytest
from sqlalchemy import func, select

from api.properties import handler
from api.sales import handler as sales_handler
from src.services.schema import properties
from tests.utils.assertions import assert_failure, assert_success
from tests.utils.factories import create_property_data
from tests.utils.helpers import call_handler


@pytest.mark.unit
def test_create_property_with_features(db_engine, seller):
    payload = create_property_data(seller_id=seller["id"], features=["Agua"], images=["https://img.test/x.jpg"])

    data = assert_success(call_handler(handler, "POST", "/api/properties", payload), 201)

    assert data["features"] == ["Agua"]
    assert data["images"][0]["is_primary"] is True
    assert isinstance(data["price"], float)


@pytest.mark.unit
def test_create_property_invalid_json(db_engine):
    response = call_handler(handler, "POST", "/api/properties", "{broken")

    assert_failure(response, 400, error_contains="valid JSON")


@pytest.mark.unit
def test_get_property_and_missing(db_engine, available_property):
    data = assert_success(call_handler(handler, "GET", f"/api/properties/{available_property['id']}"))

    assert data["title"] == available_property["title"]
    assert_failure(call_handler(handler, "GET", "/api/properties/424242"), 404, error_contains="Property not found")


@pytest.mark.unit
def test_list_and_include_sold(db_engine, available_property, sale_payload):
    assert call_handler(handler, "GET", "/api/properties").body["count"] == 1

    call_handler(sales_handler, "POST", "/api/sales", sale_payload)

    assert call_handler(handler, "GET", "/api/properties").body["count"] == 0
    assert call_handler(handler, "GET", "/api/properties?include_sold=true").body["count"] == 1


@pytest.mark.unit
def test_update_property_ignores_status(db_engine, available_property):
    data = assert_success(call_handler(
        handler, "PUT", f"/api/properties/{available_property['id']}", {"title": "Nuevo titulo", "status": "sold"}
    ))

    assert data["title"] == "Nuevo titulo"
    assert data["status"] == "available"


@pytest.mark.unit
def test_delete_property_with_sale_is_refused(db_engine, available_property, sale_payload):
    assert_success(call_handler(sales_handler, "POST", "/api/sales", sale_payload), 201)

    response = call_handler(handler, "DELETE", f"/api/properties/{available_property['id']}")

    assert_failure(response, 400, error_contains="associated sales")
    with db_engine.connect() as conn:
        assert conn.execute(select(func.count()).select_from(properties)).scalar_one() == 1


@pytest.mark.unit
def test_delete_property(db_engine, available_property):
    assert_success(call_handler(handler, "DELETE", f"/api/properties/{available_property['id']}"))
    assert_failure(call_handler(handler, "DELETE", f"/api/properties/{available_property['id']}"), 404)


@pytest.mark.unit
def test_search_and_stats(db_engine, available_property):
    found = assert_success(call_handler(handler, "GET", f"/api/properties/search?q={quote(available_property['location'])}"))
    assert [p["id"] for p in found] == [available_property["id"]]

    stats = assert_success(call_handler(handler, "GET", "/api/properties/stats"))
    assert stats["total"] == 1 and stats["available"] == 1
