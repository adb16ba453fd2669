# tests/test_security.py
from datetime import timedelta

import pytest

from jobboard.core.errors import AuthError
from jobboard.core.security import (
    PasswordHasher,
    SecurityConfig,
    TokenSigner,
    generate_reset_token,
    hash_reset_token,
)


def test_password_hash_roundtrip():
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("s3cret")
    assert hashed != "s3cret"
    assert hasher.verify("s3cret", hashed)
    assert not hasher.verify("wrong", hashed)


def test_password_verify_rejects_empty_and_garbage():
    hasher = PasswordHasher(rounds=4)
    assert not hasher.verify("", hasher.hash("x1234"))
    assert not hasher.verify("x1234", None)
    assert not hasher.verify("x1234", "not-a-bcrypt-hash")


def test_token_sign_and_verify():
    signer = TokenSigner("k", expire_minutes=5)
    token = signer.sign("abc123")
    assert signer.verify(token) == "abc123"


def test_expired_token_rejected():
    signer = TokenSigner("k", expire_minutes=5)
    token = signer.sign("abc123", expires_delta=timedelta(seconds=-10))
    with pytest.raises(AuthError):
        signer.verify(token)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_rejected(token):
    with pytest.raises(AuthError):
        TokenSigner("k").verify(token)


def test_token_signed_with_other_secret_rejected():
    token = TokenSigner("one").sign("abc123")
    with pytest.raises(AuthError):
        TokenSigner("two").verify(token)


def test_reset_token_only_hash_is_returned_for_storage():
    raw, hashed = generate_reset_token()
    assert len(raw) == 40
    assert hashed == hash_reset_token(raw)
    assert hashed != raw


def test_security_config_is_immutable():
    cfg = SecurityConfig(secret_key="k")
    with pytest.raises(Exception):
        cfg.secret_key = "other"
