from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from catalog.config import Settings
from catalog.exceptions import InvalidTokenError
from catalog.utils.security import (
    create_access_token,
    get_password_hash,
    validate_email,
    verify_access_token,
    verify_password,
)


@pytest.fixture
def test_settings():
    return Settings(SECRET_KEY="unit-secret", DATABASE_URL="sqlite://", _env_file=None)


def test_password_hash_is_salted_and_verifiable():
    h1 = get_password_hash("s3cret")
    h2 = get_password_hash("s3cret")
    assert h1 != h2
    assert "s3cret" not in h1
    assert verify_password("s3cret", h1)
    assert not verify_password("wrong", h1)


def test_verify_password_rejects_empty_and_unknown_hash():
    assert not verify_password("", get_password_hash("x"))
    assert not verify_password("x", "")
    assert not verify_password("x", "not-a-known-hash")


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        get_password_hash("")


def test_token_round_trip(test_settings):
    token = create_access_token(42, test_settings)
    assert verify_access_token(token, test_settings) == 42


def test_token_claims_expire_one_hour_after_issue(test_settings):
    issued = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    token = create_access_token(7, test_settings, now=issued)
    claims = jwt.get_unverified_claims(token)
    assert claims["id"] == 7
    assert claims["sub"] == "7"
    assert claims["exp"] - claims["iat"] == 3600


def test_token_still_valid_just_before_expiry(test_settings):
    issued = datetime.now(timezone.utc) - timedelta(minutes=59)
    token = create_access_token(1, test_settings, now=issued)
    assert verify_access_token(token, test_settings) == 1


def test_expired_token_is_rejected(test_settings):
    issued = datetime.now(timezone.utc) - timedelta(hours=1, seconds=5)
    token = create_access_token(1, test_settings, now=issued)
    with pytest.raises(InvalidTokenError):
        verify_access_token(token, test_settings)


def test_token_signed_with_other_secret_is_rejected(test_settings):
    other = Settings(SECRET_KEY="other-secret", DATABASE_URL="sqlite://", _env_file=None)
    token = create_access_token(1, other)
    with pytest.raises(InvalidTokenError):
        verify_access_token(token, test_settings)


def test_malformed_token_is_rejected(test_settings):
    with pytest.raises(InvalidTokenError):
        verify_access_token("not.a.token", test_settings)


def test_token_without_identity_is_rejected(test_settings):
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"exp": exp}, test_settings.SECRET_KEY, algorithm=test_settings.ALGORITHM)
    with pytest.raises(InvalidTokenError):
        verify_access_token(token, test_settings)


def test_validate_email():
    assert validate_email("a@x.com")
    assert not validate_email("a@x")
    assert not validate_email("no-at-sign.com")
    assert not validate_email("spa ce@x.com")
