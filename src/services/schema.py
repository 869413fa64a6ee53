"""Relational schema (SQLAlchemy Core).

Foreign-key delete policies are part of the data contract:

- property_features, property_images -> properties: CASCADE
- sales -> properties, sales -> users (seller): CASCADE
- properties.seller_id, contacts.property_id: SET NULL
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    text,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(150), nullable=False, unique=True),
    Column("phone", String(20)),
    Column("address", String(255)),
    Column("password_hash", String(255)),
    Column("role", String(20), nullable=False, server_default="user"),
    Column("is_active", Boolean, nullable=False, server_default=text("1")),
    Column("last_login", DateTime),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_users_role_active", "role", "is_active"),
)

properties = Table(
    "properties",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(200), nullable=False),
    Column("location", String(200), nullable=False),
    Column("size", String(50), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("description", Text),
    Column("property_type", String(50), nullable=False, server_default="land"),
    Column("status", String(20), nullable=False, server_default="available"),
    Column("seller_id", Integer, ForeignKey("users.id", ondelete="SET NULL")),
    Column("latitude", Numeric(10, 8)),
    Column("longitude", Numeric(11, 8)),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_properties_status", "status"),
    Index("idx_properties_seller", "seller_id"),
    Index("idx_properties_location", "location"),
)

property_features = Table(
    "property_features",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
    Column("feature", String(100), nullable=False),
    Index("idx_features_property", "property_id"),
)

property_images = Table(
    "property_images",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
    Column("image_url", String(255), nullable=False),
    Column("is_primary", Boolean, nullable=False, server_default=text("0")),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_images_property", "property_id"),
)

contacts = Table(
    "contacts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(150)),
    Column("phone", String(20)),
    Column("message", Text),
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="SET NULL")),
    Column("contact_type", String(50), nullable=False, server_default="general"),
    Column("status", String(20), nullable=False, server_default="new"),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_contacts_email", "email"),
    Index("idx_contacts_status", "status"),
    Index("idx_contacts_created", "created_at"),
)

sales = Table(
    "sales",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
    Column("seller_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("buyer_name", String(100), nullable=False),
    Column("buyer_email", String(150)),
    Column("buyer_phone", String(20)),
    Column("sale_amount", Numeric(12, 2), nullable=False),
    Column("commission", Numeric(10, 2), nullable=False),
    Column("sale_date", Date, nullable=False),
    Column("status", String(20), nullable=False, server_default="completed"),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_sales_date", "sale_date"),
    Index("idx_sales_seller", "seller_id"),
    Index("idx_sales_property", "property_id"),
)

user_sessions = Table(
    "user_sessions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE")),
    Column("session_data", JSON),
    Column("ip_address", String(45)),
    Column("user_agent", Text),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("expires_at", DateTime),
    Index("idx_sessions_user", "user_id"),
    Index("idx_sessions_expires", "expires_at"),
)
