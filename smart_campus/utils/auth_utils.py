import datetime
from typing import Any, Dict, Optional

import jwt

from smart_campus.config import Config
from smart_campus.utils.logging_utils import get_logger

logger = get_logger("auth")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60

if not Config.SECRET_KEY:
    logger.warning("No SECRET_KEY set; bearer tokens will be ignored and all chatbot users treated as guests.")


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[datetime.timedelta] = None,
    secret_key: Optional[str] = None,
) -> str:
    """Create a new JWT access token."""
    key = secret_key or Config.SECRET_KEY
    if not key:
        raise ValueError("No SECRET_KEY set. Please set SECRET_KEY in .env file to issue tokens.")
    to_encode = data.copy()
    expire = datetime.datetime.now(datetime.timezone.utc) + (
        expires_delta or datetime.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT token."""
    key = secret_key or Config.SECRET_KEY
    if not key or not token:
        return None
    try:
        payload = jwt.decode(token, key, algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
