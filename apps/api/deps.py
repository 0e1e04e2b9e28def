from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pymongo.database import Database

from core.config import settings
from core.security import InvalidScopeToken, decode_scope_token
from domain.value_objects import VerifiedScope
from services.access.gate import AccessGate
from services.persistence.mongo import AccountRepository, ApplicationRepository, get_mongo

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_settings():
    """Provides application settings/config globally."""
    return settings


def get_db() -> Database:
    """Dependency for the MongoDB database."""
    return get_mongo()


def get_applications(db: Database = Depends(get_db)) -> ApplicationRepository:  # noqa: B008
    return ApplicationRepository(db)


def get_accounts(db: Database = Depends(get_db)) -> AccountRepository:  # noqa: B008
    return AccountRepository(db)


def get_gate(accounts: AccountRepository = Depends(get_accounts)) -> AccessGate:  # noqa: B008
    return AccessGate(accounts)


def get_scope(token: str = Depends(oauth2_scheme)) -> VerifiedScope:  # noqa: B008
    """Decode the bearer token issued at login into the caller's scope."""
    try:
        return decode_scope_token(token)
    except InvalidScopeToken:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            "invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_super_admin(scope: VerifiedScope = Depends(get_scope)) -> VerifiedScope:  # noqa: B008
    if not scope.is_super_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "super-admin only")
    return scope


def require_confirmation(confirm: bool = False) -> None:
    """Destructive routes run only with ``?confirm=true``."""
    if not confirm:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "confirmation required")
