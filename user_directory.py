from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from errors import DuplicateUser, InvalidCredentials
from models import User

DEMO_PASSWORDS = frozenset({"demo123", "password"})


# -------------------------
# Credential verification
# -------------------------
class CredentialVerifier(ABC):
    """Decides whether a password is valid for a known user."""

    @abstractmethod
    def verify(self, user: User, password: str) -> bool: ...

    def enroll(self, user: User, password: str) -> None:
        """Called after registration. Verifiers without storage ignore it."""

    def clear(self) -> None:
        pass


class DemoCredentialVerifier(CredentialVerifier):
    """
    Placeholder: any known user logs in with one of the shared demo passwords.
    Not authentication.
    """

    def __init__(self, passwords: frozenset[str] = DEMO_PASSWORDS) -> None:
        self.passwords = passwords

    def verify(self, user: User, password: str) -> bool:
        return password in self.passwords


class HashedCredentialVerifier(CredentialVerifier):
    """Per-user werkzeug password hashes; users without a hash cannot log in."""

    def __init__(self) -> None:
        self._hashes: dict[str, str] = {}

    def enroll(self, user: User, password: str) -> None:
        self._hashes[user.username] = generate_password_hash(password)

    def verify(self, user: User, password: str) -> bool:
        h = self._hashes.get(user.username)
        return h is not None and check_password_hash(h, password)

    def clear(self) -> None:
        self._hashes.clear()


# -------------------------
# Directory
# -------------------------
class UserDirectory:
    def __init__(self, verifier: Optional[CredentialVerifier] = None) -> None:
        self.verifier = verifier or DemoCredentialVerifier()
        self._users: list[User] = []

    def clear(self) -> None:
        self._users.clear()
        self.verifier.clear()

    def find_by_username(self, username: str) -> Optional[User]:
        for u in self._users:
            if u.username == username:
                return u
        return None

    def all(self) -> list[User]:
        return list(self._users)

    def authenticate(self, username: str, password: str) -> User:
        user = self.find_by_username(username)
        if user is None or not self.verifier.verify(user, password):
            raise InvalidCredentials()
        return user

    def register(
        self,
        username: str,
        email: str,
        klu_id: str,
        password: str,
        user_type: str,
        created_at: str,
    ) -> User:
        if any(u.username == username or u.klu_id == klu_id for u in self._users):
            raise DuplicateUser()

        user = User(
            user_id=self._next_id(),
            username=username,
            email=email,
            klu_id=klu_id,
            user_type=user_type,
            created_at=created_at,
        )
        self._users.append(user)
        self.verifier.enroll(user, password)
        return user

    def _next_id(self) -> int:
        return max((u.user_id for u in self._users), default=0) + 1
