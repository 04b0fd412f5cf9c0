"""Database configuration, models, and the per-project issue store."""

from app.database.config import engine, Base, get_db
from app.database import models
from app.database.store import ProjectCollection, ProjectRegistry, get_registry

__all__ = ["engine", "Base", "get_db", "models", "ProjectCollection", "ProjectRegistry", "get_registry"]
