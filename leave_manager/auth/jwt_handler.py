# leave_manager/auth/jwt_handler.py
# Uses python-jose to create/verify the Bearer tokens handed out by /api/login
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

from jose import jwt, JWTError

from leave_manager.config import JWT_SECRET, TOKEN_EXPIRES_MINUTES

ALGORITHM = "HS256"


def create_access_token(payload: Dict[str, Any], expires_minutes: int = TOKEN_EXPIRES_MINUTES,
                        secret: str = JWT_SECRET) -> str:
    """
    Create a JWT token with an 'exp' claim.
    payload: a dict, e.g. {"sub": "<user uuid>", "role": "employee"}
    Returns a JWT string.
    """
    to_encode = payload.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def decode_jwt(token: str, secret: str = JWT_SECRET) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a JWT token. Returns payload dict on success, otherwise None
    (bad signature, malformed or expired).
    """
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
