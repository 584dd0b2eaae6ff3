"""User registration, login and the persisted session."""

import logging
import uuid
from typing import Optional

from .errors import (
    DuplicateUsername,
    InvalidCredentials,
    NotLoggedIn,
    PasswordMismatch,
    PasswordTooShort,
    WrongCurrentPassword,
)
from .loader import (
    clear_active_user,
    load_active_user,
    load_users,
    save_active_user,
    save_users,
)
from .storage import Storage
from .user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4


class Accounts:
    """
    Identity and session management over a Storage.

    The session user is kept in memory and mirrored under the active-user
    key so it survives a restart.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._current: Optional[User] = load_active_user(storage)

    @property
    def current_user(self) -> Optional[User]:
        return self._current

    def require_user(self) -> User:
        if self._current is None:
            raise NotLoggedIn()
        return self._current

    def register(self, name: str, username: str, password: str) -> User:
        """Create a user and log them in. Fails on a case-insensitive duplicate."""
        username = username.strip()
        users = load_users(self.storage)
        if any(u.matches_username(username) for u in users):
            raise DuplicateUsername()

        user = User(str(uuid.uuid4()), name, username, password)
        users.append(user)
        save_users(self.storage, users)
        self._start_session(user)
        logger.info("Registered user %s", username)
        return user

    def login(self, username: str, password: str) -> User:
        username = username.strip()
        for user in load_users(self.storage):
            if user.matches_username(username) and user.password == password:
                self._start_session(user)
                logger.info("User %s logged in", user.username)
                return user
        raise InvalidCredentials()

    def change_password(
        self, current_password: str, new_password: str, confirm_password: str
    ) -> User:
        """
        Update the session user's password.

        Checks run in order: current password, confirmation, minimum length.
        The user table is written before the session mirror; a crash between
        the two writes leaves the mirror with the old password.
        """
        user = self.require_user()
        if current_password != user.password:
            raise WrongCurrentPassword()
        if new_password != confirm_password:
            raise PasswordMismatch()
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise PasswordTooShort()

        users = load_users(self.storage)
        for stored in users:
            if stored.id == user.id:
                stored.password = new_password
        save_users(self.storage, users)

        updated = User(user.id, user.name, user.username, new_password)
        self._start_session(updated)
        logger.info("Password changed for %s", user.username)
        return updated

    def logout(self) -> None:
        self._current = None
        clear_active_user(self.storage)

    def _start_session(self, user: User) -> None:
        self._current = user
        save_active_user(self.storage, user)
