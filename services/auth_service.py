"""
Authentication flow: register, login, logout, refresh.

The service owns no state of its own. It is built once by the application
factory with the store handle and the token settings, and every operation
maps store, hash and token failures onto the APIError taxonomy before they
leave this module.
"""
from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.db_storage import DBStorage
from models.user import User
from utils.exceptions import (
    DuplicateCredential,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidRefreshToken,
    MissingRefreshToken,
    NotAuthorized,
    StoreError,
)
from utils.security import (
    ExpiredToken,
    TokenError,
    TokenSettings,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

# Verified against when the email is unknown so both rejections cost one argon2 check
_DUMMY_HASH = hash_password("no-such-user-placeholder")


class AuthService:
    def __init__(self, storage: DBStorage, tokens: TokenSettings):
        self.storage = storage
        self.tokens = tokens

    def register(self, username: str, email: str, password: str) -> User:
        """
        Create a user with a hashed password and no session.
        A clash on either username or email is one failure: DuplicateCredential.
        """
        session = self.storage.get_session()
        try:
            exists = session.query(
                session.query(User)
                .filter(or_(User.email == email, User.username == username))
                .exists()
            ).scalar()
            if exists:
                logger.warning("Registration rejected: duplicate credential")
                raise DuplicateCredential()

            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                refresh_token=None,
            )
            self.storage.new(user)
            self.storage.save()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same name/email
            logger.warning("Registration rejected by unique constraint")
            raise DuplicateCredential() from exc
        except SQLAlchemyError as exc:
            logger.exception("Registration failed")
            raise StoreError("Registration failed") from exc

        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> Dict[str, str]:
        """
        Check credentials and open a session: a fresh access/refresh pair,
        with the refresh token stored on the user (replacing any prior one).
        Unknown email and wrong password are indistinguishable to the caller.
        """
        session = self.storage.get_session()
        try:
            user = session.query(User).filter(User.email == email).first()
        except SQLAlchemyError as exc:
            logger.exception("Login failed")
            raise StoreError("Login failed") from exc

        if user is None:
            verify_password(password, _DUMMY_HASH)
            logger.warning("Login rejected: invalid credentials")
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.warning("Login rejected: invalid credentials")
            raise InvalidCredentials()

        access_token = self.tokens.issue_access(user.id)
        refresh_token = self.tokens.issue_refresh(user.id)

        user.refresh_token = refresh_token
        try:
            self.storage.new(user)
            self.storage.save()
        except SQLAlchemyError as exc:
            logger.exception("Login failed")
            raise StoreError("Login failed") from exc

        logger.info("User %s logged in", user.id)
        return {"accessToken": access_token, "refreshToken": refresh_token}

    def logout(self, user: User | None) -> None:
        """Clear the stored refresh token of an already authenticated user."""
        if user is None:
            raise NotAuthorized()
        user.refresh_token = None
        try:
            self.storage.new(user)
            self.storage.save()
        except SQLAlchemyError as exc:
            logger.exception("Logout failed")
            raise StoreError("Logout failed") from exc
        logger.info("User %s logged out", user.id)

    def refresh(self, refresh_token: str | None) -> Dict[str, str]:
        """
        Trade the current refresh token for a new access token.
        The refresh token itself is not rotated.
        """
        if not refresh_token:
            raise MissingRefreshToken()

        try:
            subject = self.tokens.verify_refresh(refresh_token)
        except TokenError as exc:
            logger.warning("Refresh rejected: %s", exc)
            if self.tokens.expose_errors:
                reason = "Refresh token expired" if isinstance(exc, ExpiredToken) else "Invalid token"
                raise InvalidOrExpiredToken(reason) from exc
            raise InvalidOrExpiredToken() from exc

        try:
            user = self.storage.get(User, subject)
        except SQLAlchemyError as exc:
            logger.exception("Refresh failed")
            raise StoreError("Token refresh failed") from exc

        # Unknown user and superseded/cleared token share one failure
        if user is None or user.refresh_token != refresh_token:
            logger.warning("Refresh rejected: token does not match stored session")
            raise InvalidRefreshToken()

        logger.info("Issued new access token for user %s", user.id)
        return {"accessToken": self.tokens.issue_access(user.id)}
