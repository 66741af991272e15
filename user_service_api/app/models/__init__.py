"""
Domain models.

Models are plain Python objects independent from both the API schemas
and the storage layer.
"""

from .user import User

__all__ = ["User"]
