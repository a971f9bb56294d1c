from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from fleetquery.core.config import settings

ALGORITHM = "HS256"


def create_access_token(subject: str | Any, expires_delta: timedelta) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry; raises jwt.InvalidTokenError."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
