import asyncio
import datetime

from smart_campus.api.dependencies import get_current_user_optional, identity_from_claims
from smart_campus.config import Config
from smart_campus.engines.chat_engine import Identity
from smart_campus.utils.auth_utils import create_access_token, decode_access_token


def test_token_round_trip_keeps_claims():
    token = create_access_token({"sub": "u1", "role": "faculty"})
    payload = decode_access_token(token)
    assert payload["sub"] == "u1"
    assert payload["role"] == "faculty"
    assert "exp" in payload


def test_decode_rejects_wrong_secret_and_expired():
    foreign = create_access_token({"sub": "u1"}, secret_key="someone-else")
    expired = create_access_token({"sub": "u1"}, expires_delta=datetime.timedelta(seconds=-1))
    assert decode_access_token(foreign) is None
    assert decode_access_token(expired) is None
    assert decode_access_token("") is None


def test_decode_without_secret_is_anonymous(monkeypatch):
    token = create_access_token({"sub": "u1"})
    monkeypatch.setattr(Config, "SECRET_KEY", None)
    assert decode_access_token(token) is None


def test_identity_from_claims_variants():
    assert identity_from_claims({"id": 7, "name": "Ravi Kumar", "role": "admin"}) == Identity(
        id="7", display_name="Ravi Kumar", role="admin"
    )
    assert identity_from_claims({"_id": "abc", "first_name": "Meera", "last_name": "N"}) == Identity(
        id="abc", display_name="Meera N", role=None
    )
    assert identity_from_claims({"sub": "only-id"}).display_name == "only-id"
    assert identity_from_claims({"name": "No Id"}) is None
    assert identity_from_claims(None) is None


def test_optional_user_dependency():
    token = create_access_token({"sub": "u9", "name": "Kiran", "role": "student"})

    assert asyncio.run(get_current_user_optional(None)) is None
    assert asyncio.run(get_current_user_optional("garbage")) is None
    identity = asyncio.run(get_current_user_optional(token))
    assert identity == Identity(id="u9", display_name="Kiran", role="student")
    assert asyncio.run(get_current_user_optional(f"Bearer {token}")) == identity
