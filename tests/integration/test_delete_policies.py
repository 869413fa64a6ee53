"""Referential rules between users, properties, sales and contacts."""

import pytest
from sqlalchemy import delete, func, select

from src.models.contact import ContactCreate
from src.models.sale import SaleCreate
from src.services.contact_repository import ContactRepository
from src.services.property_repository import PropertyRepository
from src.services.sale_repository import SaleRepository
from src.services.schema import property_features, property_images, sales, users
from tests.utils.factories import create_contact_data, create_sale_data


def _count(engine, table) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()


@pytest.mark.integration
def test_removing_seller_row_cascades_sales_and_orphans_properties(db_engine, seller, available_property):
    SaleRepository(db_engine).create(SaleCreate(**create_sale_data(available_property["id"], seller["id"])))

    with db_engine.begin() as conn:
        conn.execute(delete(users).where(users.c.id == seller["id"]))

    assert _count(db_engine, sales) == 0
    prop = PropertyRepository(db_engine).get_by_id(available_property["id"])
    assert prop["seller_id"] is None
    assert prop["seller_name"] is None


@pytest.mark.integration
def test_deleting_property_removes_features_images_and_unlinks_contacts(db_engine, available_property):
    contacts = ContactRepository(db_engine)
    contact = contacts.create(ContactCreate(**create_contact_data(available_property["id"])))

    PropertyRepository(db_engine).delete(available_property["id"])

    assert _count(db_engine, property_features) == 0
    assert _count(db_engine, property_images) == 0
    remaining = contacts.get_by_id(contact["id"])
    assert remaining["property_id"] is None
    assert remaining["property_title"] is None


@pytest.mark.integration
def test_deleting_sale_keeps_property_sold(db_engine, seller, available_property):
    repository = SaleRepository(db_engine)
    sale = repository.create(SaleCreate(**create_sale_data(available_property["id"], seller["id"])))

    repository.delete(sale["id"])

    assert PropertyRepository(db_engine).get_by_id(available_property["id"])["status"] == "sold"
    assert _count(db_engine, sales) == 0
