from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from typing import Any, Dict, Optional

from smart_campus.engines.chat_engine import ChatResponder, Identity
from smart_campus.utils.auth_utils import decode_access_token

header_scheme = APIKeyHeader(name="Authorization", auto_error=False)


def identity_from_claims(payload: Optional[Dict[str, Any]]) -> Optional[Identity]:
    """Map verified token claims onto the identity echoed back by the chatbot."""
    if not isinstance(payload, dict):
        return None

    user_id = next(
        (str(payload[key]) for key in ("id", "_id", "user_id", "sub") if payload.get(key)),
        None,
    )
    if not user_id:
        return None

    name = str(payload.get("name") or "").strip()
    if not name:
        first = str(payload.get("firstName") or payload.get("first_name") or "").strip()
        last = str(payload.get("lastName") or payload.get("last_name") or "").strip()
        name = f"{first} {last}".strip()

    role = payload.get("role")
    return Identity(id=user_id, display_name=name or user_id, role=str(role) if role else None)


async def get_current_user_optional(token: Optional[str] = Depends(header_scheme)) -> Optional[Identity]:
    if not token:
        return None
    if token.startswith("Bearer "):
        token = token.split(" ", 1)[1]
    return identity_from_claims(decode_access_token(token))


async def get_chat_responder(request: Request) -> ChatResponder:
    return request.app.state.chat_responder
