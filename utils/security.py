"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Signed, time-limited access/refresh tokens via PyJWT
- TokenSettings: the secrets and lifetimes the auth flow and the gate share
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

ACCESS = "access"
REFRESH = "refresh"
TOKEN_KINDS = (ACCESS, REFRESH)

ph = PasswordHasher()


class TokenError(Exception):
    """Raised when a token cannot be accepted."""


class ExpiredToken(TokenError):
    pass


class InvalidSignature(TokenError):
    """Bad signature, wrong kind, or a string that is not a token at all."""


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def _now() -> datetime:
    return datetime.now(timezone.utc)


def issue_token(
    kind: str,
    subject: str,
    secret: str,
    ttl: timedelta,
    algorithm: str = "HS256",
    now: Optional[datetime] = None,
) -> str:
    """
    Sign a token carrying `subject`, its `kind` and an absolute expiry of
    now + ttl. The same inputs at the same instant yield the same token.
    """
    if kind not in TOKEN_KINDS:
        raise ValueError(f"Unknown token kind: {kind}")
    issued_at = int((now or _now()).timestamp())
    # exp derives from the truncated iat so the lifetime is exactly ttl
    payload = {
        "sub": str(subject),
        "type": kind,
        "iat": issued_at,
        "exp": issued_at + int(ttl.total_seconds()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(token: str, secret: str, kind: str, algorithm: str = "HS256") -> str:
    """
    Decode and validate a token and return its subject.
    Raises ExpiredToken once the current time reaches the encoded expiry and
    InvalidSignature for everything else.
    """
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "sub", "type"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredToken("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidSignature(f"Invalid token: {exc}") from exc

    if decoded.get("type") != kind:
        raise InvalidSignature("Wrong token type")
    return decoded["sub"]


@dataclass(frozen=True)
class TokenSettings:
    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    expose_errors: bool = False

    def __post_init__(self):
        if not self.access_secret or not self.refresh_secret:
            raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be set")
        if self.access_secret == self.refresh_secret:
            raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenSettings":
        return cls(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_ttl=config["JWT_ACCESS_EXPIRES"],
            refresh_ttl=config["JWT_REFRESH_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            expose_errors=bool(config.get("EXPOSE_TOKEN_ERRORS", False)),
        )

    def issue_access(self, subject: str) -> str:
        return issue_token(ACCESS, subject, self.access_secret, self.access_ttl, self.algorithm)

    def issue_refresh(self, subject: str) -> str:
        return issue_token(REFRESH, subject, self.refresh_secret, self.refresh_ttl, self.algorithm)

    def verify_access(self, token: str) -> str:
        return verify_token(token, self.access_secret, ACCESS, self.algorithm)

    def verify_refresh(self, token: str) -> str:
        return verify_token(token, self.refresh_secret, REFRESH, self.algorithm)
