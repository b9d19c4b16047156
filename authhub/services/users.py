"""User registration and administration. At least one admin always remains."""

import logging

from authhub.core.errors import ConflictError, LastAdminError, NotFoundError
from authhub.core.security import hash_password
from authhub.models import User
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)


def register_user(store: Storage, email: str, password: str) -> User:
    """Create a password user; the first user ever becomes admin."""
    if store.get_user_by_email(email) is not None:
        raise ConflictError("User with this email already exists")
    return store.create_user(email=email, password_hash=hash_password(password))


def get_user(store: Storage, user_id: str) -> User:
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _guard_last_admin(store: Storage, user: User) -> None:
    """Raise if ``user`` is the only admin. Locks admin rows until commit."""
    admins = store.lock_admins()
    if user.role == "admin" and len(admins) <= 1:
        raise LastAdminError()


def update_user(
    store: Storage, user_id: str, email: str | None = None, role: str | None = None
) -> User:
    user = get_user(store, user_id)
    changes: dict[str, str] = {}
    if email is not None and email != user.email:
        other = store.get_user_by_email(email)
        if other is not None and other.id != user.id:
            raise ConflictError("User with this email already exists")
        changes["email"] = email
    if role is not None and role != user.role:
        if role != "admin":
            _guard_last_admin(store, user)
        changes["role"] = role
    if not changes:
        return user
    logger.info("Updating user %s: %s", user.id, sorted(changes))
    return store.update_user(user, **changes)


def delete_user(store: Storage, user_id: str) -> None:
    """Delete a user and, by cascade, the services they own."""
    user = get_user(store, user_id)
    _guard_last_admin(store, user)
    store.delete_user(user)
    logger.info("Deleted user %s", user_id)
