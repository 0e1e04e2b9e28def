from __future__ import annotations

import time
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from core.config import settings
from domain.value_objects import VerifiedScope

# pbkdf2 keeps passlib off the bcrypt backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGO = "HS256"


class InvalidScopeToken(Exception):
    pass


def hash_code(plain: str) -> str:
    return pwd_context.hash(plain)


def is_hashed(code: Any) -> bool:
    """True when ``code`` is a hash this context understands (not a legacy plaintext code)."""
    if not isinstance(code, str) or not code:
        return False
    return pwd_context.identify(code) is not None


def verify_code(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_scope_token(scope: VerifiedScope, minutes: int | None = None) -> str:
    now = int(time.time())
    ttl = settings.ACCESS_TOKEN_EXPIRE_MIN if minutes is None else minutes
    payload = {
        "sub": scope.tenant,
        "name": scope.display_name,
        "role": scope.role,
        "iat": now,
        "exp": now + ttl * 60,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)


def decode_scope_token(tok: str) -> VerifiedScope:
    try:
        payload = jwt.decode(tok, settings.SECRET_KEY, algorithms=[ALGO])
    except JWTError as e:
        raise InvalidScopeToken(str(e)) from e
    tenant = payload.get("sub")
    if not tenant:
        raise InvalidScopeToken("token has no subject")
    return VerifiedScope(
        tenant=tenant,
        display_name=payload.get("name") or tenant,
        role=payload.get("role") or "tenant",
    )
