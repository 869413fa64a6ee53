"""The combined router used by the local development server."""

import pytest

from src.server import ENDPOINTS, LocalHandler
from tests.utils.assertions import assert_failure, assert_success
from tests.utils.factories import create_contact_data, create_sale_data
from tests.utils.helpers import call_handler


@pytest.mark.integration
def test_index_lists_endpoints():
    data = assert_success(call_handler(LocalHandler, "GET", "/"))

    assert data["endpoints"] == ENDPOINTS


@pytest.mark.integration
def test_unknown_route_is_404_with_path():
    body = assert_failure(call_handler(LocalHandler, "GET", "/api/nothing/here"), 404)

    assert body["path"] == "/api/nothing/here"


@pytest.mark.integration
def test_lead_to_sale_flow(db_engine, seller, available_property):
    contact = assert_success(
        call_handler(LocalHandler, "POST", "/api/contacts", create_contact_data(available_property["id"])), 201
    )
    assert_success(call_handler(LocalHandler, "PATCH", f"/api/contacts/{contact['id']}/status", {"status": "closed"}))

    sale = create_sale_data(available_property["id"], seller["id"], buyer_email=contact["email"])
    assert_success(call_handler(LocalHandler, "POST", "/api/sales", sale), 201)

    assert call_handler(LocalHandler, "GET", "/api/properties").body["count"] == 0
    seller_sales = call_handler(LocalHandler, "GET", f"/api/sales/seller/{seller['id']}")
    assert seller_sales.body["data"][0]["buyer_email"] == contact["email"]
    assert_failure(call_handler(LocalHandler, "DELETE", f"/api/properties/{available_property['id']}"), 400)
