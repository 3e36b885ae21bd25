from __future__ import annotations

import logging
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import FieldErrors
from ..core.constants import (
    FULL_NAME_MAX_LENGTH,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    TOKEN_TYPE,
    USERNAME_MAX_LENGTH,
)
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, BadRequestError, ConflictError
from ..security.token_service import TokenService
from .model import AuthResult, Principal, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."
USERNAME_TAKEN = "Username already exists"


class Authenticator:
    """Verifies username + password against stored hashes."""

    # Checked for unknown usernames so both failures cost one hash verify.
    _DUMMY_HASH = generate_password_hash("attendance-tracker-unknown-user")

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> Principal:
        user = self._users.get_by_username(username)
        if not user:
            check_password_hash(self._DUMMY_HASH, password)
            raise AuthenticationError(INVALID_CREDENTIALS)

        try:
            ok = check_password_hash(user.password_hash, password)
        except (TypeError, ValueError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError(INVALID_CREDENTIALS)

        return Principal.from_user(user)


class AuthService:
    """Use cases: self-registration and login."""

    def __init__(self, users: UserRepository, authenticator: Authenticator, tokens: TokenService):
        self._users = users
        self._authenticator = authenticator
        self._tokens = tokens

    def register(self, *, username: Any, password: Any, full_name: Any) -> AuthResult:
        errors = FieldErrors()
        username = errors.require_text("username", username, max_len=USERNAME_MAX_LENGTH)
        password = errors.require_text(
            "password", password, min_len=PASSWORD_MIN_LENGTH, max_len=PASSWORD_MAX_LENGTH, strip=False
        )
        full_name = errors.require_text("fullName", full_name, max_len=FULL_NAME_MAX_LENGTH)
        errors.raise_if_any()

        if self._users.exists_by_username(username):
            raise BadRequestError(USERNAME_TAKEN)

        try:
            user = self._users.save(
                User(
                    user_id=None,
                    username=username,
                    password_hash=generate_password_hash(password),
                    full_name=full_name,
                    role=Role.EMPLOYEE,
                )
            )
        except ConflictError:
            # Lost a race with a concurrent registration of the same name.
            raise BadRequestError(USERNAME_TAKEN)
        logger.info("Registered user %s (id=%s)", user.username, user.user_id)
        return self._result(Principal.from_user(user))

    def login(self, *, username: Any, password: Any) -> AuthResult:
        errors = FieldErrors()
        username = errors.require_text("username", username)
        password = errors.require_text("password", password, strip=False)
        errors.raise_if_any()

        try:
            principal = self._authenticator.authenticate(username, password)
        except AuthenticationError:
            logger.warning("Failed login for %r", username)
            raise
        return self._result(principal)

    def _result(self, principal: Principal) -> AuthResult:
        return AuthResult(
            access_token=self._tokens.issue(principal),
            token_type=TOKEN_TYPE,
            username=principal.username,
            role=principal.role,
        )


def ensure_admin(users: UserRepository, *, username: str, password: str, full_name: str) -> bool:
    """Create the admin account unless the username is taken. Returns True when created."""
    if users.exists_by_username(username):
        return False
    users.save(
        User(
            user_id=None,
            username=username,
            password_hash=generate_password_hash(password),
            full_name=full_name,
            role=Role.ADMIN,
        )
    )
    logger.info("Seeded admin user %r", username)
    return True
