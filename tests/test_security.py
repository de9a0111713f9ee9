"""Tests for token handling, password hashing and the user service."""

import asyncio
import time

import pytest

from franchise_hub_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from franchise_hub_api.app.schemas.user import ProfileUpdate, UserCreate, UserRole
from franchise_hub_api.app.services.user_service import UserService


class TestTokens:
    def test_round_trip(self):
        token = create_access_token({"sub": "business@demo.com"})
        payload = decode_access_token(token)

        assert payload["sub"] == "business@demo.com"
        assert payload["exp"] > time.time()

    def test_tampered_token_is_rejected(self):
        header, payload, signature = create_access_token({"sub": "a@b.c"}).split(".")
        forged = create_access_token({"sub": "admin@b.c"}).split(".")[1]

        assert decode_access_token(f"{header}.{forged}.{signature}") is None
        assert decode_access_token("not-a-token") is None
        assert decode_access_token("a.b.!!!") is None

    def test_expired_token_is_rejected(self, monkeypatch):
        token = create_access_token({"sub": "a@b.c"}, expires_delta=1)
        monkeypatch.setattr(time, "time", lambda: 10 ** 12)

        assert decode_access_token(token) is None


def test_password_hashing():
    hashed = hash_password("secret123")

    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", "garbage")
    assert hash_password("secret123") != hashed


class TestUserService:
    def test_demo_users_are_seeded_once(self):
        assert asyncio.run(UserService.seed_demo_users()) == 0
        users = asyncio.run(UserService.list_users())
        assert {u.email for u in users} == {"business@demo.com", "partner@demo.com"}
        partners = asyncio.run(UserService.list_users(UserRole.PARTNER))
        assert [u.id for u in partners] == ["demo-partner-user"]

    def test_register_and_authenticate(self):
        user = asyncio.run(
            UserService.create_user(
                UserCreate(email="new@example.com", first_name="New", role=UserRole.PARTNER, password="hunter22")
            )
        )

        assert user.password_hash != "hunter22"
        assert asyncio.run(UserService.authenticate("NEW@example.com", "hunter22")) is user
        assert user.last_login_at is not None
        assert asyncio.run(UserService.authenticate("new@example.com", "nope")) is None
        assert asyncio.run(UserService.authenticate("ghost@example.com", "hunter22")) is None

    def test_duplicate_email(self):
        with pytest.raises(ValueError):
            asyncio.run(
                UserService.create_user(
                    UserCreate(
                        email="Business@Demo.com", first_name="Dup", role=UserRole.BUSINESS, password="secret1"
                    )
                )
            )

    def test_inactive_user_cannot_log_in(self):
        user = asyncio.run(UserService.get_user_by_email("partner@demo.com"))
        user.is_active = False

        assert asyncio.run(UserService.authenticate("partner@demo.com", "password123")) is None

    def test_update_profile_and_password(self):
        user = asyncio.run(
            UserService.update_profile("demo-business-user", ProfileUpdate(company="Chai Co", phone="123"))
        )
        assert user.company == "Chai Co"
        assert user.first_name == "Demo"

        asyncio.run(UserService.set_password("business@demo.com", "changed1"))
        assert asyncio.run(UserService.authenticate("business@demo.com", "changed1")) is user

    def test_missing_users(self):
        with pytest.raises(LookupError):
            asyncio.run(UserService.get_user_by_id("missing"))
        with pytest.raises(LookupError):
            asyncio.run(UserService.set_password("missing@example.com", "whatever"))
