"""
Endpoint modules.

Each module defines an ``APIRouter`` named ``router`` which is included
by ``api.router``.
"""
