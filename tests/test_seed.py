"""Tests for the sample-data seed script."""
from app.db.schema import customer, product
from scripts.seed_db import CUSTOMERS, PRODUCTS, seed


def test_seed_fills_empty_tables(engine, count_rows):
    counts = seed(engine)

    assert counts == {"products": len(PRODUCTS), "customers": len(CUSTOMERS)}
    assert count_rows(product) == len(PRODUCTS)
    assert count_rows(customer) == len(CUSTOMERS)


def test_seed_is_harmless_to_rerun(engine, count_rows):
    seed(engine)

    assert seed(engine) == {"products": 0, "customers": 0}
    assert count_rows(product) == len(PRODUCTS)

