import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from apps.api.deps import get_accounts, get_settings, require_confirmation, require_super_admin
from core.security import hash_code
from domain.models import Account, AccountCreate, AccountRole
from domain.value_objects import VerifiedScope
from services.persistence.mongo import AccountRepository, DuplicateAccountError, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


def listing_order(accounts: list[dict], super_admin: str) -> list[dict]:
    """Super-admin first, the rest by name."""
    return sorted(accounts, key=lambda a: (a["name"] != super_admin, a["name"]))


@router.get("/", response_model=List[Account])
def list_accounts(
    scope: VerifiedScope = Depends(require_super_admin),  # noqa: B008
    accounts: AccountRepository = Depends(get_accounts),  # noqa: B008
    settings=Depends(get_settings),  # noqa: B008
):
    try:
        items = accounts.list()
    except StoreError as e:
        logger.exception("listing accounts failed")
        raise HTTPException(500, f"db error: {e}") from e
    return [
        {**a, "display_name": a.get("display_name") or a["name"]}
        for a in listing_order(items, settings.SUPER_ADMIN_NAME)
    ]


@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountCreate,
    scope: VerifiedScope = Depends(require_super_admin),  # noqa: B008
    accounts: AccountRepository = Depends(get_accounts),  # noqa: B008
    settings=Depends(get_settings),  # noqa: B008
):
    if payload.name == settings.SUPER_ADMIN_NAME:
        raise HTTPException(409, "the super-admin account already exists")
    if payload.role == AccountRole.SUPER_ADMIN:
        raise HTTPException(400, "only the built-in admin account is a super-admin")

    doc = {
        "name": payload.name,
        "display_name": payload.display_name or payload.name,
        "code": hash_code(payload.code),
        "role": payload.role.value,
    }
    try:
        account_id = accounts.create(doc)
    except DuplicateAccountError as e:
        raise HTTPException(409, str(e)) from e
    except StoreError as e:
        logger.exception("creating account %s failed", payload.name)
        raise HTTPException(500, f"db error: {e}") from e

    logger.info("account %s created by %s", payload.name, scope.tenant)
    return Account(id=account_id, **doc)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: str,
    scope: VerifiedScope = Depends(require_super_admin),  # noqa: B008
    _: None = Depends(require_confirmation),  # noqa: B008
    accounts: AccountRepository = Depends(get_accounts),  # noqa: B008
    settings=Depends(get_settings),  # noqa: B008
):
    try:
        account = accounts.get(account_id)
        if account is None:
            raise HTTPException(404, "Account not found")
        if account["name"] == settings.SUPER_ADMIN_NAME:
            raise HTTPException(403, "the super-admin account cannot be deleted")
        accounts.delete(account_id)
    except StoreError as e:
        logger.exception("deleting account %s failed", account_id)
        raise HTTPException(500, f"db error: {e}") from e

    logger.info("account %s deleted by %s", account["name"], scope.tenant)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
