"""
User endpoints.

CRUD, lookup, search and health routes for users.  Service failures
(``UserNotFoundError``, ``DuplicateEmailError``) are not caught here;
the exception handlers registered in ``main.create_app`` turn them into
error responses based on their ``kind``.

Literal sub-paths (``/search``, ``/recent``, ``/count``, ``/health``)
are declared before ``/{user_id}`` so they are matched first.
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from user_service_api.app.schemas.user import (
    ErrorResponse,
    HealthStatus,
    UserCount,
    UserCreate,
    UserRead,
    UserUpdate,
)
from user_service_api.app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "User not found"}}
_BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid input"}}


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


@router.get("", response_model=List[UserRead], summary="Get all users")
async def get_all_users(service: UserService = Depends(get_user_service)) -> List[UserRead]:
    """Retrieve a list of all users."""
    logger.info("GET /users - Fetching all users")
    users = await service.get_all_users()
    return [UserRead.from_user(user) for user in users]


@router.get(
    "/search",
    response_model=List[UserRead],
    summary="Search users",
    responses=_BAD_REQUEST,
)
async def search_users(
    name: Optional[str] = Query(None, description="Case-insensitive part of the user's name"),
    service: UserService = Depends(get_user_service),
) -> List[UserRead]:
    """Search users by name (partial match).

    ``name`` is required and must not be blank.
    """
    logger.info("GET /users/search?name=%s - Searching users", name)
    if name is None or not name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query 'name' is required",
        )
    users = await service.search_users(name)
    return [UserRead.from_user(user) for user in users]


@router.get(
    "/recent",
    response_model=List[UserRead],
    summary="Get recent users",
    responses=_BAD_REQUEST,
)
async def get_recent_users(
    days: int = Query(7, description="Number of days to look back"),
    service: UserService = Depends(get_user_service),
) -> List[UserRead]:
    """Get users created within the specified number of days."""
    logger.info("GET /users/recent?days=%d - Fetching recent users", days)
    if days <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Days must be a positive number",
        )
    users = await service.get_recent_users(days)
    return [UserRead.from_user(user) for user in users]


@router.get("/count", response_model=UserCount, summary="Get user count")
async def get_user_count(service: UserService = Depends(get_user_service)) -> UserCount:
    """Get the total number of users."""
    logger.info("GET /users/count - Fetching user count")
    return UserCount(count=await service.get_user_count())


@router.get("/health", response_model=HealthStatus, summary="Health check")
async def health_check(request: Request) -> HealthStatus:
    """Check if the user service is healthy."""
    return HealthStatus(
        status="UP",
        service=request.app.state.settings.service_name,
        timestamp=int(time.time() * 1000),
    )


@router.get(
    "/email/{email}",
    response_model=UserRead,
    summary="Get user by email",
    responses=_NOT_FOUND,
)
async def get_user_by_email(email: str, service: UserService = Depends(get_user_service)) -> UserRead:
    """Retrieve a specific user by their email address."""
    logger.info("GET /users/email/%s - Fetching user by email", email)
    user = await service.get_user_by_email(email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found with email: {email}",
        )
    return UserRead.from_user(user)


@router.get("/{user_id}", response_model=UserRead, summary="Get user by ID", responses=_NOT_FOUND)
async def get_user_by_id(user_id: int, service: UserService = Depends(get_user_service)) -> UserRead:
    """Retrieve a specific user by their ID."""
    logger.info("GET /users/%d - Fetching user by id", user_id)
    user = await service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found with id: {user_id}",
        )
    return UserRead.from_user(user)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    responses=_BAD_REQUEST,
)
async def create_user(payload: UserCreate, service: UserService = Depends(get_user_service)) -> UserRead:
    """Create a new user.

    Returns HTTP 400 if the payload is invalid or the email is taken.
    """
    logger.info("POST /users - Creating user with email: %s", payload.email)
    user = await service.create_user(payload.to_user())
    return UserRead.from_user(user)


@router.put(
    "/{user_id}",
    response_model=UserRead,
    summary="Update user",
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Update an existing user.

    Returns HTTP 404 if the user does not exist and HTTP 400 if the new
    email belongs to another user.
    """
    logger.info("PUT /users/%d - Updating user", user_id)
    user = await service.update_user(user_id, payload.to_user())
    return UserRead.from_user(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    responses=_NOT_FOUND,
)
async def delete_user(user_id: int, service: UserService = Depends(get_user_service)) -> None:
    """Delete a user by ID."""
    logger.info("DELETE /users/%d - Deleting user", user_id)
    deleted = await service.delete_user(user_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found with id: {user_id}",
        )
    return None
