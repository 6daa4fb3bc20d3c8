import jwt

from masjid_directory.core.config import settings
from masjid_directory.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_token_round_trip():
    token = create_access_token("7", "amina@example.com", ["1", "3"])

    user = decode_access_token(token)

    assert user is not None
    assert user.userId == "7"
    assert user.email == "amina@example.com"
    assert user.admin == ["1", "3"]


def test_tampered_token_is_rejected():
    token = create_access_token("7", "amina@example.com", [])
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    assert decode_access_token(tampered) is None


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode(
        {"userId": "7", "email": "amina@example.com", "admin": ["1"]},
        "a-completely-different-secret-of-sufficient-length",
        algorithm="HS256",
    )

    assert decode_access_token(forged) is None


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "JWT_EXPIRES_DAYS", -1)
    token = create_access_token("7", "amina@example.com", [])

    assert decode_access_token(token) is None


def test_garbage_is_rejected():
    assert decode_access_token("not.a.token") is None
    assert decode_access_token("") is None


def test_password_hash_is_sha256_hex():
    assert hash_password("secret") == "2bb80d537b1da3e38bd30361aa855686bde0eacd7162fef6a25fe97bf527a25b"


def test_verify_password():
    stored = hash_password("correct horse")

    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)
