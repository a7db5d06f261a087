# backend/auth/utils.py
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from config import settings

# =====================================================
# 🔹 Tokens
# =====================================================
def create_access_token(data: dict, expires_minutes: int = 60) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None

def is_privileged(claims: Optional[dict]) -> bool:
    """El núcleo sólo confía en el rol que trae el token."""
    return bool(claims) and claims.get("role") == settings.ADMIN_ROLE
