from __future__ import annotations

import logging

from core.config import settings
from core.security import hash_code, is_hashed, verify_code
from domain.value_objects import SUPER_ADMIN_ROLE, VerifiedScope
from services.persistence.mongo import AccountRepository, StoreError

logger = logging.getLogger(__name__)


class AccessDenied(Exception):
    pass


class UnknownTenantError(AccessDenied):
    def __init__(self, tenant: str):
        super().__init__("user not found")
        self.tenant = tenant


class PasswordMismatchError(AccessDenied):
    def __init__(self, tenant: str):
        super().__init__("wrong password")
        self.tenant = tenant


def display_name_of(account: dict) -> str:
    return account.get("display_name") or account["name"]


def role_of(account: dict) -> str:
    if account["name"] == settings.SUPER_ADMIN_NAME:
        return SUPER_ADMIN_ROLE
    return account.get("role") or "tenant"


class AccessGate:
    """Per-tenant password check against the ``accounts`` collection."""

    def __init__(self, accounts: AccountRepository):
        self.accounts = accounts

    def authenticate(self, tenant: str, password: str) -> VerifiedScope:
        account = self.accounts.find_by_name(tenant)
        if account is None:
            logger.info("login for unknown tenant %r", tenant)
            raise UnknownTenantError(tenant)

        code = account.get("code")
        if is_hashed(code):
            ok = verify_code(password, code)
        else:
            # plaintext codes predate hashing; accepted once, then upgraded
            logger.warning("account %r stores a plaintext code", tenant)
            ok = code is not None and str(code) == password
            if ok:
                try:
                    self.accounts.set_code(account["id"], hash_code(password))
                except StoreError:
                    logger.exception("could not upgrade the code of %r", tenant)

        if not ok:
            logger.info("wrong password for tenant %r", tenant)
            raise PasswordMismatchError(tenant)

        return VerifiedScope(
            tenant=account["name"],
            display_name=display_name_of(account),
            role=role_of(account),
        )


def ensure_super_admin(accounts: AccountRepository) -> bool:
    """Create the super-admin account from config if it is missing. True when created."""
    if not settings.SUPER_ADMIN_CODE:
        return False
    if accounts.find_by_name(settings.SUPER_ADMIN_NAME) is not None:
        return False
    accounts.create(
        {
            "name": settings.SUPER_ADMIN_NAME,
            "display_name": settings.SUPER_ADMIN_NAME,
            "code": hash_code(settings.SUPER_ADMIN_CODE),
            "role": SUPER_ADMIN_ROLE,
        }
    )
    logger.info("created super-admin account %r", settings.SUPER_ADMIN_NAME)
    return True
