"""Bearer token authentication."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from .errors import Unauthorized


@dataclass(frozen=True)
class Identity:
    """Authenticated caller; ``user_id`` is matched against record owners."""

    user_id: str
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)


def create_access_token(
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode: Dict[str, Any] = {"sub": user_id}
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_identity(token: str, secret: str, algorithm: str = "HS256") -> Identity:
    """Verify a token and extract the caller.

    Raises:
        Unauthorized: bad signature, expired token, or no user claim
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        raise Unauthorized("Invalid or expired token.") from None

    user_id = payload.get("sub") or payload.get("userId")
    if user_id is None:
        raise Unauthorized("Token does not identify a user.")
    return Identity(user_id=str(user_id), claims=payload)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
