"""
Session persistence and mock authentication.

The session store is the server-side stand-in for the browser's local
storage: a flat key-value map holding account records, the account signed
in on each device session and the guest trial counter of every session.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from podboard.errors import InvalidInputError
from podboard.session.schemas import Identity, User

_logger = logging.getLogger(__name__)

USER_KEY = "podboard_user"
GUEST_TRIALS_KEY = "podboard_guest_trials"
ACCOUNT_KEY = "podboard_account"

MIN_PASSWORD_LENGTH = 6


def user_key(session_id: str) -> str:
    return f"{USER_KEY}:{session_id}"


def account_key(user_id: str) -> str:
    return f"{ACCOUNT_KEY}:{user_id}"


def guest_trials_key(session_id: str) -> str:
    return f"{GUEST_TRIALS_KEY}:{session_id}"


class SessionStore(ABC):
    """Key-value persistence for identities and trial counters."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""


class InMemorySessionStore(SessionStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SessionManager:
    """Resolves identities and performs the mock sign-up / sign-in flows.

    A session key points at an account id; the account record carries the
    user's trial counter so that it survives signing out and back in.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def identity(self, session_id: str) -> Identity:
        return Identity(session_id=session_id, user=self.load_user(session_id))

    def load_user(self, session_id: str) -> Optional[User]:
        user_id = self.store.get(user_key(session_id))
        if user_id is None:
            return None
        user = self.load_account(user_id)
        if user is None:
            self.store.delete(user_key(session_id))
        return user

    def load_account(self, user_id: str) -> Optional[User]:
        raw = self.store.get(account_key(user_id))
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding corrupt account record %s", user_id)
            self.store.delete(account_key(user_id))
            return None

    def save_user(self, user: User) -> None:
        self.store.set(account_key(user.id), user.model_dump_json())

    def sign_up(
        self, session_id: str, name: str, email: str, password: str
    ) -> Identity:
        if not name.strip() or not email.strip() or not password.strip():
            raise InvalidInputError("Name, email and password are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        email = email.strip()
        if self.load_account(_account_id(email)) is not None:
            raise InvalidInputError(f"An account already exists for {email}")

        user = User(id=_account_id(email), email=email, name=name.strip())
        self.save_user(user)
        self.store.set(user_key(session_id), user.id)
        _logger.info(f"Created account {user.id} on session {session_id}")
        return Identity(session_id=session_id, user=user)

    def sign_in(self, session_id: str, email: str, password: str) -> Identity:
        # Mock authentication: any non-empty credentials are accepted.
        if not email.strip() or not password.strip():
            raise InvalidInputError("Email and password are required")

        email = email.strip()
        user = self.load_account(_account_id(email))
        if user is None:
            user = User(id=_account_id(email), email=email, name=email.split("@")[0])
            self.save_user(user)
        self.store.set(user_key(session_id), user.id)
        _logger.info(f"Signed in {email} on session {session_id}")
        return Identity(session_id=session_id, user=user)

    def sign_out(self, session_id: str) -> Identity:
        self.store.delete(user_key(session_id))
        return Identity(session_id=session_id)


def _account_id(email: str) -> str:
    return email.strip().lower()
