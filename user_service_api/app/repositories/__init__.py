"""
Persistence layer.

``UserRepository`` defines what the service needs from storage;
``SQLiteUserRepository`` provides it on top of :mod:`..core.db`.
"""

from .base import UserRepository
from .sqlite import SQLiteUserRepository

__all__ = ["UserRepository", "SQLiteUserRepository"]
