"""Infrastructure module - Database engine and session management."""

from genrepo.infra.database import Base, close_db, db_manager, get_db, init_db

__all__ = [
    "Base",
    "close_db",
    "db_manager",
    "get_db",
    "init_db",
]
