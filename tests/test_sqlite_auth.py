"""Tests for household.adapters.sqlite_auth — local accounts and sessions."""

import hmac
import logging
from unittest.mock import patch

import pytest

from household.ports.auth_port import AuthError


class TestSignUpAndSignIn:
    @pytest.mark.asyncio
    async def test_sign_up_returns_session(self, auth):
        session = await auth.sign_up("Ana@Example.com", "secret", {"name": "Ana"})
        assert session is not None
        assert session.access_token
        assert session.user.email == "ana@example.com"
        assert session.user.metadata == {"name": "Ana"}

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, auth):
        await auth.sign_up("ana@example.com", "secret", {})
        with pytest.raises(AuthError, match="already registered"):
            await auth.sign_up("ANA@example.com", "other", {})

    @pytest.mark.asyncio
    async def test_sign_in(self, auth):
        created = await auth.sign_up("ana@example.com", "secret", {})
        session = await auth.sign_in("ana@example.com", "secret")
        assert session.user.id == created.user.id
        assert session.access_token != created.access_token

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth):
        await auth.sign_up("ana@example.com", "secret", {})
        with pytest.raises(AuthError, match="Invalid login credentials"):
            await auth.sign_in("ana@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_hash_compared_in_constant_time(self, auth):
        await auth.sign_up("ana@example.com", "secret", {})
        with patch(
            "household.adapters.sqlite_auth.hmac.compare_digest", wraps=hmac.compare_digest,
        ) as compare:
            await auth.sign_in("ana@example.com", "secret")
            with pytest.raises(AuthError):
                await auth.sign_in("ana@example.com", "wrong")
        assert compare.call_count == 2

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth):
        with pytest.raises(AuthError):
            await auth.sign_in("nobody@example.com", "secret")


class TestSessions:
    @pytest.mark.asyncio
    async def test_get_user_and_sign_out(self, auth):
        session = await auth.sign_up("ana@example.com", "secret", {})
        user = await auth.get_user(session.access_token)
        assert user is not None and user.email == "ana@example.com"

        await auth.sign_out(session.access_token)
        assert await auth.get_user(session.access_token) is None

    @pytest.mark.asyncio
    async def test_unknown_or_empty_token(self, auth):
        assert await auth.get_user("bogus") is None
        assert await auth.get_user("") is None


class TestPasswords:
    @pytest.mark.asyncio
    async def test_update_password(self, auth):
        session = await auth.sign_up("ana@example.com", "old", {})
        await auth.update_password(session.access_token, "new")
        with pytest.raises(AuthError):
            await auth.sign_in("ana@example.com", "old")
        assert (await auth.sign_in("ana@example.com", "new")).access_token

    @pytest.mark.asyncio
    async def test_update_password_needs_session(self, auth):
        with pytest.raises(AuthError):
            await auth.update_password("bogus", "new")

    @pytest.mark.asyncio
    async def test_recovery_link_is_logged(self, auth, caplog):
        await auth.sign_up("ana@example.com", "secret", {})
        with caplog.at_level(logging.INFO, logger="household.adapters.sqlite_auth"):
            await auth.reset_password_for_email("ana@example.com", "http://app/reset")
        assert "http://app/reset#access_token=" in caplog.text
        assert "type=recovery" in caplog.text

    @pytest.mark.asyncio
    async def test_recovery_for_unknown_email_is_silent(self, auth):
        await auth.reset_password_for_email("nobody@example.com", "http://app/reset")
