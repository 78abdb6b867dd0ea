from datetime import timedelta

import pytest
from jose import jwt

from bloodlink.errors import TokenExpired, TokenInvalid
from bloodlink.tokens import TokenClaims, TokenService


def test_issued_token_verifies_to_subject_and_role(token_service, clock):
    token, expires_at = token_service.issue(42, "patient")
    assert expires_at == clock.now + timedelta(hours=5)
    assert token_service.verify(token) == TokenClaims(subject_id=42, role="patient")


def test_token_is_valid_until_just_before_expiry(token_service, clock):
    token, _ = token_service.issue(1, "donor")
    clock.advance(hours=5, seconds=-1)
    assert token_service.verify(token).subject_id == 1


def test_token_expiring_now_is_expired(token_service, clock):
    token, _ = token_service.issue(1, "donor")
    clock.advance(hours=5)
    with pytest.raises(TokenExpired):
        token_service.verify(token)
    clock.advance(days=1)
    with pytest.raises(TokenExpired):
        token_service.verify(token)


def test_token_signed_with_another_secret_is_invalid(token_service, clock):
    other = TokenService("another-secret", clock=clock)
    token, _ = other.issue(1, "donor")
    with pytest.raises(TokenInvalid):
        token_service.verify(token)


def test_tampered_token_is_invalid(token_service):
    token, _ = token_service.issue(1, "donor")
    header, payload, signature = token.split(".")
    forged = jwt.encode({"sub": "1", "role": "admin", "exp": 4102444800}, "guess", algorithm="HS256")
    with pytest.raises(TokenInvalid):
        token_service.verify(".".join([header, forged.split(".")[1], signature]))


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x.y.z"])
def test_malformed_token_is_invalid(token_service, garbage):
    with pytest.raises(TokenInvalid):
        token_service.verify(garbage)


@pytest.mark.parametrize(
    "claims",
    [
        {"role": "donor", "exp": 4102444800},
        {"sub": "not-a-number", "role": "donor", "exp": 4102444800},
        {"sub": "1", "exp": 4102444800},
        {"sub": "1", "role": "donor"},
    ],
)
def test_token_with_missing_claims_is_invalid(token_service, claims):
    token = jwt.encode(claims, "test-secret", algorithm="HS256")
    with pytest.raises(TokenInvalid):
        token_service.verify(token)


def test_errors_do_not_leak_secret_or_claims(token_service, clock):
    token, _ = token_service.issue(7, "patient")
    clock.advance(hours=6)
    with pytest.raises(TokenExpired) as exc:
        token_service.verify(token)
    assert "test-secret" not in str(exc.value)
    assert "patient" not in str(exc.value)


def test_secret_is_required():
    with pytest.raises(ValueError):
        TokenService("")
