"""Shared pytest fixtures and configuration."""

import os

import pytest
from freezegun import freeze_time

# Set test environment variables before any settings are cached
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SLACK_WEBHOOK_URL"] = ""
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from src.services.database import build_engine, init_db, set_engine  # noqa: E402
from src.utils.settings import get_settings  # noqa: E402
from tests.utils.factories import create_property_data, create_sale_data, create_seller_data  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_engine():
    """In-memory SQLite database with the full schema, installed as the shared engine."""
    engine = build_engine("sqlite://")
    init_db(engine)
    set_engine(engine)
    yield engine
    set_engine(None)
    engine.dispose()


@pytest.fixture
def seller(db_engine):
    """A persisted seller."""
    from src.models.user import SellerCreate
    from src.services.seller_repository import SellerRepository

    return SellerRepository(db_engine).create(SellerCreate(**create_seller_data()))


@pytest.fixture
def available_property(db_engine, seller):
    """A persisted, available property owned by ``seller``."""
    from src.models.property import PropertyCreate
    from src.services.property_repository import PropertyRepository

    data = create_property_data(seller_id=seller["id"], features=["Agua", "Luz"], images=["https://img.test/1.jpg"])
    return PropertyRepository(db_engine).create(PropertyCreate(**data))


@pytest.fixture
def sale_payload(available_property, seller):
    """Valid sale input for ``available_property``."""
    return create_sale_data(property_id=available_property["id"], seller_id=seller["id"])


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
