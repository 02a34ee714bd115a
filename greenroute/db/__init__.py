"""Database configuration and utilities."""

from greenroute.db.base import Base, SessionLocal, engine, get_db

__all__ = ["Base", "engine", "get_db", "SessionLocal"]
