"""Database package."""

from afterparty.database.base import Base
from afterparty.database.session import DatabaseSessionManager, sessionmanager, get_db_session
from afterparty.database import models

__all__ = ["Base", "DatabaseSessionManager", "sessionmanager", "get_db_session", "models"]
