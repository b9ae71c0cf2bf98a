# scripts/seed_db.py
"""
Insert sample products and customers so the API has something to bill.

    python -m scripts.seed_db
"""

import logging

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine

from app.config import get_settings
from app.db.engine import get_engine, wait_for_database
from app.db.schema import customer, product

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

PRODUCTS = [
    {"name": "Keyboard", "description": "Mechanical keyboard, 87 keys", "price": 7999, "quantity": 40},
    {"name": "Mouse", "description": "Wireless optical mouse", "price": 2499, "quantity": 120},
    {"name": "Monitor", "description": "27 inch IPS monitor", "price": 25999, "quantity": 15},
    {"name": "USB cable", "description": "USB-C to USB-A, 1 m", "price": 599, "quantity": 300},
]

CUSTOMERS = [
    {"first_name": "Ada", "last_name": "Lovelace"},
    {"first_name": "Alan", "last_name": "Turing"},
    {"first_name": "Grace", "last_name": "Hopper"},
]


def seed(engine: Engine) -> dict:
    """
    Insert the sample rows into empty tables only, so re-running is harmless.
    Returns how many rows went into each table.
    """
    counts = {"products": 0, "customers": 0}
    with engine.begin() as conn:
        if conn.execute(select(func.count()).select_from(product)).scalar_one() == 0:
            conn.execute(insert(product), PRODUCTS)
            counts["products"] = len(PRODUCTS)

        if conn.execute(select(func.count()).select_from(customer)).scalar_one() == 0:
            conn.execute(insert(customer), CUSTOMERS)
            counts["customers"] = len(CUSTOMERS)

    return counts


def main():
    settings = get_settings()
    engine = get_engine()
    wait_for_database(engine, settings.db_connect_attempts, settings.db_connect_delay)

    counts = seed(engine)
    logger.info("Products inserted:   %s", counts["products"])
    logger.info("Customers inserted:  %s", counts["customers"])


if __name__ == "__main__":
    main()
