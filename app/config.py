# app/config.py

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DB_URL = "sqlite:///db.sqlite"  # file in project root


@dataclass(frozen=True)
class Settings:
    database_url: str
    listen_port: int = 8000
    db_connect_attempts: int = 5
    db_connect_delay: float = 3.0
    request_timeout: float = 30.0
    bill_isolation_level: str = "SERIALIZABLE"
    create_schema: bool = False
    log_level: str = "INFO"


def _build_database_url() -> str:
    """
    DATABASE_URL wins; otherwise assemble a Postgres URL from the DB_* parts
    when DB_HOST is set; otherwise fall back to the local SQLite file.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST")
    if not host:
        return DEFAULT_DB_URL

    port = os.getenv("DB_PORT", "5432")
    database = os.getenv("DB_DATABASE", "postgres")
    username = os.getenv("DB_USERNAME", "postgres")
    password = os.getenv("DB_PASSWORD", "postgres")
    return f"postgresql+psycopg2://{username}:{password}@{host}:{port}/{database}"


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    if env_file:
        load_dotenv(env_file)

    return Settings(
        database_url=_build_database_url(),
        listen_port=int(os.getenv("LISTEN_PORT", "8000")),
        db_connect_attempts=int(os.getenv("DB_CONNECT_ATTEMPTS", "5")),
        db_connect_delay=float(os.getenv("DB_CONNECT_DELAY", "3.0")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30.0")),
        bill_isolation_level=os.getenv("BILL_ISOLATION_LEVEL", "SERIALIZABLE").upper(),
        create_schema=os.getenv("CREATE_SCHEMA", "0") == "1",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    return load_settings()
