from __future__ import annotations

from datetime import timedelta

import pytest
from jose import jwt

from jobmarket.core.tokens import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    Identity,
    Role,
    TokenCodec,
    TokenError,
    TokenVerificationError,
    extract_token_from_header,
)

SECRET = "unit-test-secret-with-at-least-32-bytes!!"


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(SECRET)


@pytest.mark.parametrize("user_id,role", [(1, Role.talent), (42, Role.company), (987654, Role.talent)])
def test_issue_then_verify_returns_same_identity(codec: TokenCodec, user_id: int, role: Role) -> None:
    claims = codec.verify(codec.issue(user_id, role))
    assert claims.identity == Identity(user_id=user_id, role=role)
    assert claims.token_type == ACCESS_TOKEN
    assert claims.expires_at > claims.issued_at


def test_access_token_lifetime_is_short(codec: TokenCodec) -> None:
    claims = codec.verify(codec.issue(7, Role.talent))
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_refresh_token_has_its_own_type_and_lifetime(codec: TokenCodec) -> None:
    token = codec.issue(7, Role.company, token_type=REFRESH_TOKEN)
    claims = codec.verify(token, expected_type=REFRESH_TOKEN)
    assert claims.expires_at - claims.issued_at == timedelta(days=7)
    assert claims.jti


def test_each_token_gets_a_distinct_jti(codec: TokenCodec) -> None:
    first = codec.verify(codec.issue(1, Role.talent))
    second = codec.verify(codec.issue(1, Role.talent))
    assert first.jti != second.jti


def test_refresh_token_is_not_accepted_as_access_token(codec: TokenCodec) -> None:
    token = codec.issue(3, Role.talent, token_type=REFRESH_TOKEN)
    with pytest.raises(TokenVerificationError) as exc_info:
        codec.verify(token)
    assert exc_info.value.reason == TokenError.INVALID


def test_access_token_is_not_accepted_as_refresh_token(codec: TokenCodec) -> None:
    with pytest.raises(TokenVerificationError):
        codec.verify(codec.issue(3, Role.talent), expected_type=REFRESH_TOKEN)


def test_expired_token_fails_even_with_valid_signature(codec: TokenCodec) -> None:
    token = codec.issue(5, Role.talent, expires_delta=timedelta(seconds=-30))
    with pytest.raises(TokenVerificationError) as exc_info:
        codec.verify(token)
    assert exc_info.value.reason == TokenError.EXPIRED


def test_tampered_signature_fails(codec: TokenCodec) -> None:
    header, payload, signature = codec.issue(5, Role.talent).split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
    with pytest.raises(TokenVerificationError) as exc_info:
        codec.verify(".".join([header, payload, flipped]))
    assert exc_info.value.reason == TokenError.INVALID_SIGNATURE


def test_token_signed_with_another_secret_fails(codec: TokenCodec) -> None:
    foreign = TokenCodec("another-secret-that-is-also-32-bytes-long").issue(5, Role.talent)
    with pytest.raises(TokenVerificationError) as exc_info:
        codec.verify(foreign)
    assert exc_info.value.reason == TokenError.INVALID_SIGNATURE


def test_tampered_payload_fails(codec: TokenCodec) -> None:
    genuine = codec.issue(5, Role.talent)
    forged_payload = jwt.encode(
        {**jwt.get_unverified_claims(genuine), "sub": "6"}, "not-the-secret", algorithm="HS256"
    ).split(".")[1]
    header, _, signature = genuine.split(".")
    with pytest.raises(TokenVerificationError):
        codec.verify(".".join([header, forged_payload, signature]))


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "not.a.jwt.at.all"])
def test_malformed_tokens(codec: TokenCodec, token: str) -> None:
    with pytest.raises(TokenVerificationError) as exc_info:
        codec.verify(token)
    assert exc_info.value.reason == TokenError.MALFORMED


def test_unknown_role_is_invalid(codec: TokenCodec) -> None:
    claims = jwt.get_unverified_claims(codec.issue(5, Role.talent))
    claims["role"] = "admin"
    token = jwt.encode(claims, SECRET, algorithm="HS256")
    with pytest.raises(TokenVerificationError) as exc_info:
        codec.verify(token)
    assert exc_info.value.reason == TokenError.INVALID


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer aaa.bbb.ccc", "aaa.bbb.ccc"),
        (None, None),
        ("", None),
        ("Basic dXNlcjpwYXNz", None),
        ("bearer aaa.bbb.ccc", None),
        ("Bearer ", None),
        ("Bearer aaa.bbb", None),
        ("Bearer aaa..ccc", None),
        ("Bearer aaa.bbb.ccc.ddd", None),
    ],
)
def test_extract_token_from_header(header, expected) -> None:
    assert extract_token_from_header(header) == expected
