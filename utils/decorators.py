from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps

from flask import request, current_app
from sqlalchemy.exc import SQLAlchemyError

from models.db_storage import DBStorage
from models.user import User
from utils.exceptions import MissingAuthHeader, MissingToken, NotAuthorized, StoreError
from utils.security import ExpiredToken, TokenError, TokenSettings

logger = logging.getLogger(__name__)

BEARER = "bearer"


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """The live user a verified access token resolved to."""

    user: User

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def email(self) -> str:
        return self.user.email


def extract_bearer_token(header: str | None) -> str:
    """
    Only `Authorization: Bearer <token>` is accepted.
    No header -> MissingAuthHeader, scheme without token -> MissingToken,
    any other shape -> NotAuthorized.
    """
    if header is None or not header.strip():
        raise MissingAuthHeader()
    parts = header.split()
    if parts[0].lower() != BEARER:
        raise NotAuthorized()
    if len(parts) == 1:
        raise MissingToken()
    if len(parts) > 2:
        raise NotAuthorized()
    return parts[1]


class AccessGate:
    """Verifies the access token of a request and resolves it to a user."""

    def __init__(self, storage: DBStorage, tokens: TokenSettings):
        self.storage = storage
        self.tokens = tokens

    def authenticate(self, authorization_header: str | None) -> AuthenticatedIdentity:
        token = extract_bearer_token(authorization_header)
        try:
            user_id = self.tokens.verify_access(token)
        except TokenError as exc:
            logger.warning("Access token rejected: %s", exc)
            if self.tokens.expose_errors:
                raise NotAuthorized("Token expired" if isinstance(exc, ExpiredToken) else "Invalid token") from exc
            raise NotAuthorized() from exc

        try:
            user = self.storage.get(User, user_id)
        except SQLAlchemyError as exc:
            logger.exception("Identity lookup failed")
            raise StoreError("Authorization failed") from exc
        if user is None:
            # Token still verifies but the account is gone
            logger.warning("Access token subject %s no longer exists", user_id)
            raise NotAuthorized()
        return AuthenticatedIdentity(user=user)


def auth_required(fn):
    """
    Gate a view: the view runs only if the request carries a valid access
    token for a live user, and receives it as the `identity` keyword.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        gate: AccessGate = current_app.extensions["access_gate"]
        identity = gate.authenticate(request.headers.get("Authorization"))
        return fn(*args, identity=identity, **kwargs)

    return wrapper


def store_errors(message: str):
    """Turn unexpected SQLAlchemy failures in a view into a StoreError with a fixed message."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except SQLAlchemyError as exc:
                current_app.extensions["storage"].rollback()
                logger.exception(message)
                raise StoreError(message) from exc

        return wrapper

    return decorator
