"""
Database infrastructure: engine, ORM tables and the unit of work.
"""

from .database import Base, SessionLocal, engine, get_db
from . import models  # noqa: F401  registers the tables on Base.metadata

__all__ = ["Base", "SessionLocal", "engine", "get_db"]
