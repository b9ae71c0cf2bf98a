# scripts/init_db.py
"""
Create the database schema.

    python -m scripts.init_db           # create missing tables
    python -m scripts.init_db --drop    # drop everything first
"""

import argparse
import logging

from app.config import get_settings
from app.db.engine import get_engine, init_db, wait_for_database

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Create the bills database schema")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()

    settings = get_settings()
    engine = get_engine()
    wait_for_database(engine, settings.db_connect_attempts, settings.db_connect_delay)
    init_db(engine, drop=args.drop)
    logger.info("DB schema created.")


if __name__ == "__main__":
    main()
