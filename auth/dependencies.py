# backend/auth/dependencies.py
import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .utils import decode_access_token, is_privileged

logger = logging.getLogger("auth.dependencies")

bearer_scheme = HTTPBearer(auto_error=False)

# =====================================================
# 🔐 Identidad verificada del llamante
# =====================================================
def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="No autorizado, falta el token.")
    claims = decode_access_token(credentials.credentials)
    if not claims:
        raise HTTPException(status_code=401, detail="Token inválido o expirado.")
    return claims

# =====================================================
# 🛡️ Sólo administradores
# =====================================================
def require_admin(claims: dict = Depends(get_current_claims)) -> dict:
    if not is_privileged(claims):
        logger.warning(f"⚠️ Acceso de escritura denegado a {claims.get('email', 'desconocido')}")
        raise HTTPException(status_code=403, detail="No autorizado como administrador.")
    return claims
