"""
Pydantic models for user data.

``UserCreate`` and ``UserUpdate`` validate request bodies before they
reach the service: a malformed field is rejected with HTTP 400.
Server-managed fields (``id``, ``createdAt``, ``updatedAt``) are
ignored when sent by clients.  ``UserRead`` is the response shape and
serializes timestamps with camelCase keys.
"""

from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.user import User


class UserBase(BaseModel):
    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        examples=["John Doe"],
        description="Display name, 2 to 100 characters",
    )
    email: str = Field(..., examples=["john@example.com"])
    bio: Optional[str] = Field(None, max_length=500, examples=["Software developer"])

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def email_is_valid(cls, value: str) -> str:
        # Syntax check only; the address is stored exactly as submitted.
        try:
            validate_email(value, check_deliverability=False, globally_deliverable=False)
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        return value

    def to_user(self) -> User:
        return User(name=self.name, email=self.email, bio=self.bio)


class UserCreate(UserBase):
    """Schema for registering a user."""


class UserUpdate(UserBase):
    """Schema for replacing a user's name, email and bio.

    All three fields are overwritten; omitting ``bio`` clears it.
    """


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: int
    name: str
    email: str
    bio: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            bio=user.bio,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserCount(BaseModel):
    count: int


class HealthStatus(BaseModel):
    status: str = Field(..., examples=["UP"])
    service: str = Field(..., examples=["UserService"])
    timestamp: int = Field(..., description="Epoch milliseconds")


class ErrorResponse(BaseModel):
    error: str
    kind: Optional[str] = Field(None, examples=["not_found"])
    timestamp: int = Field(..., description="Epoch milliseconds")
