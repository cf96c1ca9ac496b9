# app/shared/auth.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError  # python-jose[cryptography]

from app.shared.config import settings
from app.shared.errors import AuthenticationError, ValidationError

bearer = HTTPBearer(auto_error=False, scheme_name="bearerAuth")

LEVELS = ("admin", "user", "viewer")
BCRYPT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72  # bcrypt input limit

@dataclass(frozen=True)
class Caller:
    """Identity of the current request, resolved once from the bearer token."""
    id: int
    level: str


def hash_password(pw: str) -> str:
    if len(pw.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(pw.encode(), bcrypt.gensalt(BCRYPT_ROUNDS)).decode()

def verify_password(pw: str, ph: str) -> bool:
    try:
        return bcrypt.checkpw(pw.encode(), ph.encode())
    except ValueError:
        return False

def create_access_token(
    sub: str,
    role: str = "user",
    extra: Optional[Dict[str, Any]] = None,
    minutes: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.JWT_EXPIRE_MIN)
    payload: Dict[str, Any] = {
        "sub": sub,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if settings.JWT_ISS:
        payload["iss"] = settings.JWT_ISS
    if settings.JWT_AUD:
        payload["aud"] = settings.JWT_AUD
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_KEY, algorithm=settings.JWT_ALG)

def get_caller(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> Caller:
    # Always require a bearer token
    if not creds:
        raise AuthenticationError("No token, authorization denied")

    try:
        payload = jwt.decode(
            creds.credentials,
            settings.JWT_KEY,
            algorithms=[settings.JWT_ALG],
            audience=settings.JWT_AUD,
            issuer=settings.JWT_ISS,
            options={
                "verify_aud": bool(settings.JWT_AUD),
                "verify_iss": bool(settings.JWT_ISS),
            },
        )
    except JWTError:
        raise AuthenticationError("Token is not valid")

    sub = payload.get("sub")
    role = payload.get("role")
    if not sub or role not in LEVELS:
        raise AuthenticationError("Token is not valid")
    try:
        return Caller(id=int(sub), level=role)
    except ValueError:
        raise AuthenticationError("Token is not valid")
