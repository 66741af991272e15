"""
Business logic for users.

``UserService`` enforces email uniqueness on create and update and runs
each mutation inside a single repository transaction.  Every operation
is wrapped in a tracing span and logged; neither affects the returned
values.  Failures are reported as :class:`UserServiceError` subclasses
so callers can dispatch on ``error.kind``.
"""

import logging
from typing import List, Optional

from ..core.errors import DuplicateEmailError, ErrorKind, UserNotFoundError
from ..core.tracing import NoOpTracer, Tracer
from ..models.user import User
from ..repositories.base import UserRepository


class UserService:
    """Сервис для работы с пользователями.

    Stateless between calls; all state lives in the repository.
    """

    def __init__(
        self,
        repository: UserRepository,
        tracer: Optional[Tracer] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._repository = repository
        self._tracer = tracer or NoOpTracer()
        self._logger = logger or logging.getLogger(__name__)

    async def get_all_users(self) -> List[User]:
        with self._tracer.start_span("UserService.get_all_users") as span:
            self._logger.info("Fetching all users")
            users = self._repository.list_all()
            span.set_attribute("user.count", len(users))
            self._logger.info("Retrieved %d users", len(users))
            return users

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._tracer.start_span("UserService.get_user_by_id") as span:
            span.set_attribute("user.id", user_id)
            self._logger.info("Fetching user with id: %d", user_id)
            user = self._repository.find_by_id(user_id)
            span.set_attribute("user.found", user is not None)
            if user is not None:
                self._logger.info("Found user: %s", user.email)
            else:
                self._logger.warning("User not found with id: %d", user_id)
            return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        with self._tracer.start_span("UserService.get_user_by_email") as span:
            span.set_attribute("user.email", email)
            self._logger.info("Fetching user with email: %s", email)
            user = self._repository.find_by_email(email)
            span.set_attribute("user.found", user is not None)
            if user is not None:
                self._logger.info("Found user with email: %s", email)
            else:
                self._logger.warning("User not found with email: %s", email)
            return user

    async def create_user(self, draft: User) -> User:
        """Persist a new user.

        Raises ``DuplicateEmailError`` if another user already has
        ``draft.email``; nothing is written in that case.  On success the
        same object is returned carrying its ``id`` and timestamps.
        """
        with self._tracer.start_span("UserService.create_user") as span:
            span.set_attribute("user.email", draft.email)
            span.set_attribute("user.name", draft.name)
            self._logger.info("Creating new user with email: %s", draft.email)
            try:
                with self._repository.transaction() as repository:
                    if repository.exists_by_email(draft.email):
                        raise DuplicateEmailError(draft.email)
                    repository.persist(draft)
            except DuplicateEmailError:
                self._logger.error("Email already exists: %s", draft.email)
                span.set_attribute("error", True)
                span.set_attribute("error.type", ErrorKind.DUPLICATE_EMAIL.value)
                raise
            span.set_attribute("user.id", draft.id)
            span.set_attribute("user.created", True)
            self._logger.info("User created successfully with id: %d", draft.id)
            return draft

    async def update_user(self, user_id: int, changes: User) -> User:
        """Overwrite name, email and bio of an existing user.

        The duplicate check only runs when the email actually changes.
        ``id`` and ``created_at`` are preserved; ``updated_at`` moves
        forward.

        Raises ``UserNotFoundError`` or ``DuplicateEmailError``.
        """
        with self._tracer.start_span("UserService.update_user") as span:
            span.set_attribute("user.id", user_id)
            span.set_attribute("user.email", changes.email)
            self._logger.info("Updating user with id: %d", user_id)
            try:
                with self._repository.transaction() as repository:
                    existing = repository.find_by_id(user_id)
                    if existing is None:
                        raise UserNotFoundError(user_id)
                    if existing.email != changes.email and repository.exists_by_email_excluding_id(
                        changes.email, user_id
                    ):
                        raise DuplicateEmailError(changes.email)
                    existing.apply_changes(changes)
                    repository.persist(existing)
            except UserNotFoundError:
                self._logger.error("User not found with id: %d", user_id)
                span.set_attribute("error", True)
                span.set_attribute("error.type", ErrorKind.NOT_FOUND.value)
                raise
            except DuplicateEmailError:
                self._logger.error("Email already exists: %s", changes.email)
                span.set_attribute("error", True)
                span.set_attribute("error.type", ErrorKind.DUPLICATE_EMAIL.value)
                raise
            span.set_attribute("user.updated", True)
            self._logger.info("User updated successfully with id: %d", user_id)
            return existing

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user; return ``False`` if no user had ``user_id``."""
        with self._tracer.start_span("UserService.delete_user") as span:
            span.set_attribute("user.id", user_id)
            self._logger.info("Deleting user with id: %d", user_id)
            with self._repository.transaction() as repository:
                deleted = repository.delete_by_id(user_id)
            span.set_attribute("user.deleted", deleted)
            if deleted:
                self._logger.info("User deleted successfully with id: %d", user_id)
            else:
                self._logger.warning("User not found for deletion with id: %d", user_id)
                span.set_attribute("error.type", ErrorKind.NOT_FOUND.value)
            return deleted

    async def search_users(self, name: str) -> List[User]:
        with self._tracer.start_span("UserService.search_users") as span:
            span.set_attribute("search.query", name)
            self._logger.info("Searching users with name: %s", name)
            users = self._repository.search_by_name(name)
            span.set_attribute("search.results", len(users))
            self._logger.info("Found %d users matching name: %s", len(users), name)
            return users

    async def get_recent_users(self, days: int) -> List[User]:
        with self._tracer.start_span("UserService.get_recent_users") as span:
            span.set_attribute("days", days)
            self._logger.info("Fetching users from last %d days", days)
            users = self._repository.find_recent(days)
            span.set_attribute("user.count", len(users))
            self._logger.info("Found %d users from last %d days", len(users), days)
            return users

    async def get_user_count(self) -> int:
        with self._tracer.start_span("UserService.get_user_count") as span:
            self._logger.info("Fetching user count")
            count = self._repository.count()
            span.set_attribute("user.count", count)
            self._logger.info("Total user count: %d", count)
            return count
