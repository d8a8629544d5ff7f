"""Tests du portail d'acces / Access gate tests."""

import pytest
from sqlalchemy import func, select

from garage.errors import NotFoundError
from garage.models.user import UserProfile
from garage.services.auth_gate import SessionContext, ensure_profile, is_allowed, verify_profile
from garage.services.identity import IdentityClaims
from garage.utils.auth import create_access_token, create_refresh_token, decode_subject

CLAIMS = IdentityClaims(external_id="g-123", email="rider@example.com", display_name="Rider")


@pytest.mark.asyncio
async def test_first_sign_in_creates_unverified_profile(db):
    profile, created = await ensure_profile(db, CLAIMS)
    assert created is True
    assert profile.external_id == "g-123"
    assert profile.verified is False
    assert not is_allowed(profile)


@pytest.mark.asyncio
async def test_second_sign_in_is_a_no_op(db):
    profile, _ = await ensure_profile(db, CLAIMS)
    profile.verified = True
    await db.flush()

    again, created = await ensure_profile(
        db, IdentityClaims(external_id="g-123", email="new@example.com", display_name="Renamed")
    )
    assert created is False
    assert again.id == profile.id
    assert again.email == "rider@example.com"
    assert again.verified is True
    assert await db.scalar(select(func.count(UserProfile.id))) == 1


@pytest.mark.asyncio
async def test_verify_profile_by_email(db):
    await ensure_profile(db, CLAIMS)
    profile = await verify_profile(db, "rider@example.com")
    assert profile.verified is True
    assert SessionContext(profile=profile).allowed

    profile = await verify_profile(db, "g-123", verified=False)
    assert SessionContext(profile=profile).allowed is False


@pytest.mark.asyncio
async def test_verify_unknown_profile(db):
    with pytest.raises(NotFoundError):
        await verify_profile(db, "nobody@example.com")


def test_no_profile_is_not_allowed():
    assert is_allowed(None) is False


def test_decode_subject_checks_token_type():
    assert decode_subject(create_access_token(42), "access") == 42
    assert decode_subject(create_refresh_token(42), "refresh") == 42
    assert decode_subject(create_access_token(42), "refresh") is None
    assert decode_subject("not-a-jwt", "access") is None
