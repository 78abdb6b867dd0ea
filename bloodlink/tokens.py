# bloodlink/tokens.py
"""Signed, time-limited bearer tokens.

Tokens are plain JWTs carrying ``sub`` (the user id as a string), ``role``,
``iat`` and ``exp``. Nothing is stored server side: a token stays valid until
it expires, so logging out is just the client throwing it away.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, NamedTuple, Optional, Tuple

from jose import jwt, JWTError

from . import config
from .errors import TokenExpired, TokenInvalid


class TokenClaims(NamedTuple):
    subject_id: int
    role: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=5),
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("a signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def issue(self, user_id: int, role: str) -> Tuple[str, datetime]:
        issued_at = self._clock()
        expires_at = issued_at + self.ttl
        payload = {
            "sub": str(user_id),
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        return token, expires_at.replace(microsecond=0)

    def verify(self, token: str) -> TokenClaims:
        try:
            # exp is checked below so that a token expiring exactly now is rejected
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except (JWTError, ValueError, TypeError):
            raise TokenInvalid()

        exp = payload.get("exp")
        role = payload.get("role")
        try:
            subject_id = int(payload.get("sub"))
        except (ValueError, TypeError):
            raise TokenInvalid()
        if not isinstance(exp, (int, float)) or not isinstance(role, str):
            raise TokenInvalid()

        if self._clock().timestamp() >= exp:
            raise TokenExpired()
        return TokenClaims(subject_id=subject_id, role=role)


_default_service: Optional[TokenService] = None


def get_token_service() -> TokenService:
    """FastAPI dependency returning the process-wide service built from config."""
    global _default_service
    if _default_service is None:
        _default_service = TokenService(
            config.JWT_SECRET,
            algorithm=config.JWT_ALGORITHM,
            ttl=config.TOKEN_TTL,
        )
    return _default_service
