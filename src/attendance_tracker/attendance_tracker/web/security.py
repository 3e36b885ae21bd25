from __future__ import annotations

from functools import wraps
from typing import Optional

import jwt
from flask import g, request

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import Principal

AUTH_FAILED = "Authentication failed."
FORBIDDEN = "You do not have permission to perform this action."


def bearer_token(header: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        raise AuthenticationError(AUTH_FAILED)
    try:
        scheme, token = header.split(" ", 1)
    except ValueError:
        raise AuthenticationError(AUTH_FAILED)
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError(AUTH_FAILED)
    return token.strip()


def authenticate_request(container: Container) -> Principal:
    """Resolve the caller from the bearer token; role comes from the stored user."""
    token = bearer_token(request.headers.get("Authorization"))
    try:
        username = container.token_service.extract_username(token)
    except jwt.InvalidTokenError:
        raise AuthenticationError(AUTH_FAILED)

    user = container.users_repo.get_by_username(username)
    if not user or not container.token_service.validate(token, user.username):
        raise AuthenticationError(AUTH_FAILED)
    return Principal.from_user(user)


def roles_required(container: Container, *roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            principal = authenticate_request(container)
            g.principal = principal
            if principal.role not in roles:
                raise AuthorizationError(FORBIDDEN)
            return view(*args, **kwargs)

        return wrapper

    return decorator
