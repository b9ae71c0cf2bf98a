# app/db/schema.py

from sqlalchemy import (
    MetaData, Table, Column, Integer, String,
    DateTime, ForeignKey, CheckConstraint, Text
)

metadata = MetaData()

product = Table(
    "product",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("description", Text, nullable=False),
    Column("price", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    CheckConstraint("price > 0", name="ck_product_price_pos"),
    CheckConstraint("quantity > 0", name="ck_product_quantity_pos"),
)

customer = Table(
    "customer",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
)

bill = Table(
    "bill",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("number", String(36), unique=True, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("customer_id", Integer, ForeignKey("customer.id"), nullable=False),
)

# Line items. The composite primary key keeps one row per (product, bill).
productbill = Table(
    "productbill",
    metadata,
    Column("product_id", Integer, ForeignKey("product.id"), primary_key=True),
    Column("bill_id", Integer, ForeignKey("bill.id", ondelete="CASCADE"), primary_key=True),
    Column("quantity", Integer, nullable=False),
    CheckConstraint("quantity > 0", name="ck_productbill_quantity_pos"),
)
