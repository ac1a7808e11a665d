from __future__ import annotations

import jwt
import pytest

from lms.services import token_service


def test_round_trip_carries_roles() -> None:
    token = token_service.create_access_token(sub="u1", roles=["instructor"])
    claims = token_service.decode_access_token(token)
    assert claims["sub"] == "u1"
    assert claims["roles"] == ["instructor"]
    assert claims["iss"] == token_service.ISSUER


def test_default_role_is_student() -> None:
    claims = token_service.decode_access_token(token_service.create_access_token(sub="u1"))
    assert claims["roles"] == ["student"]


def test_expired_token_rejected() -> None:
    token = token_service.create_access_token(sub="u1", ttl_minutes=-1)
    with pytest.raises(jwt.ExpiredSignatureError):
        token_service.decode_access_token(token)


def test_hs256_token_rejected() -> None:
    forged = jwt.encode({"sub": "u1"}, "secret", algorithm="HS256")
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(forged)
