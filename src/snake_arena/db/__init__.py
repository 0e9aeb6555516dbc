"""Database helpers for the run ledger."""

from .session import Base, SessionLocal, create_tables, engine, get_db

__all__ = ["Base", "SessionLocal", "create_tables", "engine", "get_db"]
