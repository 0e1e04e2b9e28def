from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from apps.api.deps import get_accounts, get_gate
from core.security import create_scope_token
from domain.models import FormTarget, LoginRequest, LoginResponse
from services.access.gate import (
    AccessGate,
    PasswordMismatchError,
    UnknownTenantError,
    display_name_of,
)
from services.persistence.mongo import AccountRepository, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/tenants/{name}", response_model=FormTarget)
def tenant_prompt(name: str, accounts: AccountRepository = Depends(get_accounts)):  # noqa: B008
    """Display name shown on the password prompt for ``name``."""
    try:
        account = accounts.find_by_name(name)
    except StoreError as e:
        logger.exception("tenant lookup failed")
        raise HTTPException(500, f"db error: {e}") from e
    if account is None:
        raise HTTPException(404, "user not found")
    return FormTarget(ownerId=account["name"], ownerName=display_name_of(account))


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, gate: AccessGate = Depends(get_gate)):  # noqa: B008
    try:
        scope = gate.authenticate(payload.tenant, payload.password)
    except UnknownTenantError as e:
        raise HTTPException(404, str(e)) from e
    except PasswordMismatchError as e:
        raise HTTPException(401, str(e)) from e
    except StoreError as e:
        logger.exception("login lookup failed")
        raise HTTPException(500, f"db error: {e}") from e

    return LoginResponse(
        access_token=create_scope_token(scope),
        tenant=scope.tenant,
        display_name=scope.display_name,
        role=scope.role,
    )
