from groundhog.core.config import settings
from groundhog.core.database import Base, SessionLocal, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db", "settings"]
