# app/__init__.py
"""
Package entrypoint for the FastAPI application.

This lets us run:
    uvicorn app:app --reload
or, on the configured LISTEN_PORT:
    python -m app
"""

from .main import app

__all__ = ["app"]
