from __future__ import annotations

import logging
from dataclasses import dataclass

from apps.ui.api_client import ApiClient, ApiError
from domain.value_objects import SUPER_ADMIN_ROLE

logger = logging.getLogger(__name__)

LOGIN_ERRORS = {
    404: "找不到此使用者 🚫",
    401: "密碼錯誤 🚫",
}


@dataclass
class LoginPrompt:
    """
    Password prompt bound to one tenant, kept in the page session only.

    A failed attempt records the message to show and clears the typed
    password. A successful one keeps the scope token for later calls.
    """

    tenant: str
    display_name: str = ""
    password_input: str = ""
    error: str = ""
    token: str | None = None
    role: str = ""

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN_ROLE

    def submit(self, api: ApiClient) -> bool:
        try:
            res = api.login(self.tenant, self.password_input)
        except ApiError as e:
            logger.info("login failed for %s: %s", self.tenant, e)
            self.token = None
            self.error = LOGIN_ERRORS.get(e.status_code, f"登入失敗：{e.detail}")
            self.password_input = ""
            return False

        self.token = res["access_token"]
        self.display_name = res["display_name"]
        self.role = res["role"]
        self.error = ""
        return True
