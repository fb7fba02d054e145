"""
Service-level tests for the authentication flow: register, login, logout
and refresh, driven straight through AuthService against the test store.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from models.user import User
from services import auth_service as auth_service_module
from services.auth_service import AuthService
from utils.exceptions import (
    DuplicateCredential,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidRefreshToken,
    MissingRefreshToken,
    NotAuthorized,
    StoreError,
)
from utils.security import REFRESH, TokenSettings, issue_token, verify_password

from .conftest import PASSWORD


class TestRegister:
    def test_creates_user_with_hashed_password_and_no_session(self, auth_service, storage):
        created = auth_service.register("alice", "alice@x.com", "pw1")

        stored = storage.get(User, created.id)
        assert stored.username == "alice"
        assert stored.email == "alice@x.com"
        assert stored.password_hash != "pw1"
        assert verify_password("pw1", stored.password_hash)
        assert stored.refresh_token is None

    def test_same_email_different_username_is_duplicate(self, auth_service, user):
        with pytest.raises(DuplicateCredential):
            auth_service.register("someone_else", "testuser@example.com", "pw")

    def test_same_username_different_email_is_duplicate(self, auth_service, user):
        with pytest.raises(DuplicateCredential):
            auth_service.register("testuser", "other@example.com", "pw")

    def test_duplicate_failure_is_repeatable(self, auth_service, user):
        for _ in range(2):
            with pytest.raises(DuplicateCredential) as excinfo:
                auth_service.register("testuser", "other@example.com", "pw")
            assert excinfo.value.message == "Username or email already exists!"

    def test_store_failure_is_generic(self, auth_service, storage, monkeypatch):
        def boom():
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(storage, "save", boom)
        with pytest.raises(StoreError) as excinfo:
            auth_service.register("bob", "bob@x.com", "pw")
        assert excinfo.value.message == "Registration failed"
        assert "disk" not in excinfo.value.message


class TestLogin:
    def test_returns_both_tokens_and_stores_refresh(self, auth_service, storage, user):
        tokens = auth_service.login("testuser@example.com", PASSWORD)

        assert set(tokens) == {"accessToken", "refreshToken"}
        assert auth_service.tokens.verify_access(tokens["accessToken"]) == user.id
        assert auth_service.tokens.verify_refresh(tokens["refreshToken"]) == user.id
        assert storage.get(User, user.id).refresh_token == tokens["refreshToken"]

    def test_unknown_email_and_wrong_password_look_the_same(self, auth_service, user):
        with pytest.raises(InvalidCredentials) as unknown:
            auth_service.login("nobody@example.com", PASSWORD)
        with pytest.raises(InvalidCredentials) as wrong:
            auth_service.login("testuser@example.com", "wrongPassword")
        assert unknown.value.message == wrong.value.message == "Invalid credentials"

    def test_unknown_email_still_runs_a_hash_check(self, auth_service, user, monkeypatch):
        checked = []
        real_verify = auth_service_module.verify_password

        def counting_verify(password, password_hash):
            checked.append(password_hash)
            return real_verify(password, password_hash)

        monkeypatch.setattr(auth_service_module, "verify_password", counting_verify)
        with pytest.raises(InvalidCredentials):
            auth_service.login("nobody@example.com", PASSWORD)
        assert len(checked) == 1
        assert checked[0].startswith("$argon2")

    def test_new_login_overwrites_stored_refresh_token(self, auth_service, storage, user):
        stale = issue_token(
            REFRESH,
            user.id,
            auth_service.tokens.refresh_secret,
            timedelta(days=7),
            now=datetime.now(timezone.utc) - timedelta(minutes=5),
        )
        user.refresh_token = stale
        storage.new(user)
        storage.save()

        tokens = auth_service.login("testuser@example.com", PASSWORD)

        assert storage.get(User, user.id).refresh_token == tokens["refreshToken"]
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh(stale)


class TestLogout:
    def test_clears_stored_refresh_token(self, auth_service, storage, user, tokens):
        auth_service.logout(user)
        assert storage.get(User, user.id).refresh_token is None

    def test_refresh_after_logout_fails(self, auth_service, user, tokens):
        auth_service.logout(user)
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh(tokens["refreshToken"])

    def test_without_user_is_not_authorized(self, auth_service):
        with pytest.raises(NotAuthorized):
            auth_service.logout(None)


class TestRefresh:
    def test_issues_new_access_token_only(self, auth_service, storage, user, tokens):
        result = auth_service.refresh(tokens["refreshToken"])

        assert set(result) == {"accessToken"}
        assert auth_service.tokens.verify_access(result["accessToken"]) == user.id
        # not rotated
        assert storage.get(User, user.id).refresh_token == tokens["refreshToken"]
        assert auth_service.refresh(tokens["refreshToken"])

    @pytest.mark.parametrize("missing", [None, ""])
    def test_missing_token(self, auth_service, missing):
        with pytest.raises(MissingRefreshToken):
            auth_service.refresh(missing)

    def test_garbage_token(self, auth_service, tokens):
        with pytest.raises(InvalidOrExpiredToken) as excinfo:
            auth_service.refresh("invalidToken")
        assert excinfo.value.message == "Invalid or expired refresh token"

    def test_access_token_is_not_a_refresh_token(self, auth_service, tokens):
        with pytest.raises(InvalidOrExpiredToken):
            auth_service.refresh(tokens["accessToken"])

    def test_expired_refresh_token(self, auth_service, user):
        expired = issue_token(
            REFRESH,
            user.id,
            auth_service.tokens.refresh_secret,
            timedelta(days=7),
            now=datetime.now(timezone.utc) - timedelta(days=8),
        )
        with pytest.raises(InvalidOrExpiredToken):
            auth_service.refresh(expired)

    def test_valid_token_for_unknown_user(self, auth_service):
        orphan = auth_service.tokens.issue_refresh("00000000-0000-4000-8000-000000000000")
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh(orphan)

    def test_valid_token_that_is_not_the_stored_one(self, auth_service, user, tokens):
        other = issue_token(
            REFRESH,
            user.id,
            auth_service.tokens.refresh_secret,
            timedelta(days=1),
        )
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh(other)

    def test_exposed_errors_name_the_cause(self, storage, user, app):
        settings = app.extensions["token_settings"]
        service = AuthService(
            storage,
            TokenSettings(
                access_secret=settings.access_secret,
                refresh_secret=settings.refresh_secret,
                expose_errors=True,
            ),
        )
        expired = issue_token(
            REFRESH,
            user.id,
            settings.refresh_secret,
            timedelta(minutes=1),
            now=datetime.now(timezone.utc) - timedelta(hours=1),
        )
        with pytest.raises(InvalidOrExpiredToken) as excinfo:
            service.refresh(expired)
        assert excinfo.value.message == "Refresh token expired"
        with pytest.raises(InvalidOrExpiredToken) as excinfo:
            service.refresh("invalidToken")
        assert excinfo.value.message == "Invalid token"
