"""
Bearer token issuing and verification.

Tokens are HS256 JWTs carrying the username as ``sub`` and the role as a
custom ``role`` claim.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_TTL_SECONDS, MIN_SECRET_BYTES
from ..users.model import Principal

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Signs and validates access tokens.

    The signing key is derived once from the configured secret and reused for
    the lifetime of the process.
    """

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret: Optional[str],
        *,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            secret: Shared HMAC secret; at least 32 bytes once UTF-8 encoded
            ttl_seconds: Lifetime of issued tokens
            clock: Returns the current aware UTC datetime (injectable for tests)

        Raises:
            ValueError: If the secret is missing or too short, or the TTL is not positive
        """
        if not secret:
            raise ValueError("JWT secret is not configured")
        key = secret.encode("utf-8")
        if len(key) < MIN_SECRET_BYTES:
            raise ValueError(f"JWT secret must be at least {MIN_SECRET_BYTES} bytes")
        if int(ttl_seconds) <= 0:
            raise ValueError("JWT expiration must be positive")

        self._key = key
        self._ttl = timedelta(seconds=int(ttl_seconds))
        self._clock = clock or _utc_now

        logger.info("Token service initialized with %s, tokens expire in %ss", self.ALGORITHM, int(ttl_seconds))

    def issue(self, principal: Principal) -> str:
        now = self._clock()
        payload = {
            "sub": principal.username,
            "role": principal.role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        token = jwt.encode(payload, self._key, algorithm=self.ALGORITHM)
        logger.debug("Token issued for %s", principal.username)
        return token

    def validate(self, token: str, expected_username: str) -> bool:
        """True iff the token is well-signed, names ``expected_username`` and has not expired."""
        try:
            claims = self._decode(token)
        except (jwt.InvalidTokenError, TypeError, ValueError):
            return False
        return claims.get("sub") == expected_username and self._not_expired(claims)

    def extract_username(self, token: str) -> str:
        """
        Return the token subject.

        Raises:
            jwt.ExpiredSignatureError: If the token has expired
            jwt.InvalidTokenError: If the token is malformed or badly signed
        """
        claims = self._decode(token)
        if not self._not_expired(claims):
            raise jwt.ExpiredSignatureError("Signature has expired")
        return claims["sub"]

    def _decode(self, token: str) -> Dict[str, Any]:
        # Time claims are checked against the injected clock, not PyJWT's wall clock.
        return jwt.decode(
            token,
            self._key,
            algorithms=[self.ALGORITHM],
            options={"verify_exp": False, "verify_iat": False, "require": ["sub", "exp", "iat"]},
        )

    def _not_expired(self, claims: Dict[str, Any]) -> bool:
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            return False
        return exp > self._clock().timestamp()
