from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object (no DB access code). ``user_id`` is None until saved.
    """

    user_id: Optional[int]
    username: str
    password_hash: str
    full_name: str
    role: Role


@dataclass(frozen=True)
class Principal:
    """Authenticated identity carried in a bearer token."""

    username: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(username=user.username, role=user.role)


@dataclass(frozen=True)
class AuthResult:
    access_token: str
    token_type: str
    username: str
    role: Role

    def to_dict(self) -> dict:
        return {
            "accessToken": self.access_token,
            "tokenType": self.token_type,
            "username": self.username,
            "role": self.role.value,
        }
