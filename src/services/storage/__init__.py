"""
Storage module - Database and learner progress.
"""

from src.services.storage.database import (
    Base,
    close_db,
    get_engine,
    get_session,
    init_db,
    reset_engine,
)
from src.services.storage.models_db import KeyValue
from src.services.storage.progress import STORAGE_KEY, ProgressLedger

__all__ = [
    "STORAGE_KEY",
    "Base",
    "KeyValue",
    "ProgressLedger",
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
]
