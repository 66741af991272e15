"""
Top-level API router.

Aggregates domain-specific routers.  The router itself is mounted under
``settings.api_prefix`` by ``main.create_app``.
"""

from fastapi import APIRouter

from .endpoints import users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["User Management"])
