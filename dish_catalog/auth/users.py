from __future__ import annotations

import logging

from ..catalog.data_store import RecordStore
from ..errors import EmailExistsError, StoreReadError
from .credentials import CredentialService
from .models import PublicUser, Role, User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(self, store: RecordStore, credentials: CredentialService) -> None:
        self._store = store
        self._credentials = credentials

    def register(
        self,
        username: str,
        email: str,
        password: str,
        role: Role = Role.user,
    ) -> User:
        """
        Create and persist a user.

        Raises ``EmailExistsError`` on a duplicate email and
        ``PasswordTooLongError`` for passwords bcrypt cannot hash. A
        ``StoreReadError`` propagates so a corrupt collection is never
        overwritten.
        """
        email = _normalize_email(email)
        if self._store.find_user_by_email(email) is not None:
            raise EmailExistsError(email)

        user = User(
            username=username.strip(),
            email=email,
            password_hash=self._credentials.hash_password(password),
            role=role,
        )
        self._store.append_user(user)
        logger.info("Registered user %s with role %s", user.id, user.role.value)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Verify credentials. Returns the stored user or ``None``."""
        try:
            user = self._store.find_user_by_email(_normalize_email(email))
        except StoreReadError:
            logger.warning("User collection unreadable, rejecting login", exc_info=True)
            return None
        if user is None:
            logger.info("Login rejected: no account for the given email")
            return None
        if not self._credentials.verify_password(password, user.password_hash):
            logger.info("Login rejected: wrong password for user %s", user.id)
            return None
        return user

    def get_user(self, user_id: str) -> User | None:
        try:
            return self._store.find_user_by_id(user_id)
        except StoreReadError:
            logger.warning("User collection unreadable, treating user as absent", exc_info=True)
            return None

    def list_users(self) -> list[PublicUser]:
        try:
            users = self._store.load_users()
        except StoreReadError:
            logger.warning("User collection unreadable, listing no users", exc_info=True)
            return []
        return [u.public() for u in users]
