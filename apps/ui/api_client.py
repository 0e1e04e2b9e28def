from __future__ import annotations

import re
from typing import Any
from urllib.parse import unquote

import httpx

from core.config import settings


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


_FILENAME_STAR = re.compile(r"filename\*=UTF-8''([^;]+)")


def _filename(resp: httpx.Response, fallback: str) -> str:
    m = _FILENAME_STAR.search(resp.headers.get("content-disposition", ""))
    return unquote(m.group(1)) if m else fallback


def excel_request(app: dict[str, Any]) -> dict[str, Any]:
    """Stored application -> body of ``POST /api/export-excel``."""
    return {
        "applicantName": app.get("applicant") or "",
        "vendorName": app.get("vendor_name") or "",
        "vendorRep": app.get("vendor_rep") or "",
        "contactPerson": app.get("contact_person") or "",
        "phone": app.get("phone") or "",
        "workers": app.get("workers") or [],
    }


class ApiClient:
    """Thin httpx wrapper the Streamlit pages use to reach the API."""

    def __init__(self, client: httpx.Client | None = None, base_url: str | None = None):
        self.client = client or httpx.Client(base_url=base_url or settings.API_URL, timeout=60)

    def _request(
        self, method: str, path: str, token: str | None = None, **kwargs: Any
    ) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            r = self.client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(0, f"api unreachable: {e}") from e
        if r.status_code >= 400:
            try:
                body = r.json()
                detail = body.get("detail") or body.get("error") or r.text
            except ValueError:
                detail = r.text
            raise ApiError(r.status_code, str(detail))
        return r

    # public form
    def form_target(self, owner_id: str) -> dict[str, Any]:
        return self._request("GET", f"/forms/{owner_id}").json()

    def submit(self, owner_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/forms/{owner_id}", json=payload).json()

    # auth
    def tenant_prompt(self, name: str) -> dict[str, Any]:
        return self._request("GET", f"/auth/tenants/{name}").json()

    def login(self, tenant: str, password: str) -> dict[str, Any]:
        body = {"tenant": tenant, "password": password}
        return self._request("POST", "/auth/login", json=body).json()

    # applications
    def list_applications(
        self, token: str, sort: str = "createdAt", direction: str = "desc"
    ) -> list[dict[str, Any]]:
        params = {"sort": sort, "direction": direction}
        return self._request("GET", "/applications/", token, params=params).json()

    def delete_application(self, token: str, app_id: str) -> None:
        self._request("DELETE", f"/applications/{app_id}", token, params={"confirm": "true"})

    def export_csv(
        self, token: str, sort: str = "createdAt", direction: str = "desc"
    ) -> tuple[str, bytes]:
        params = {"sort": sort, "direction": direction}
        r = self._request("GET", "/applications/export", token, params=params)
        return _filename(r, "backup.csv"), r.content

    def import_csv(
        self, token: str, filename: str, data: bytes, owner: str | None = None
    ) -> dict[str, Any]:
        r = self._request(
            "POST",
            "/applications/import",
            token,
            params={"confirm": "true"},
            files={"file": (filename, data, "text/csv")},
            data={"owner": owner} if owner else None,
        )
        return r.json()

    def export_excel(self, app: dict[str, Any]) -> tuple[str, bytes]:
        r = self._request("POST", "/api/export-excel", json=excel_request(app))
        return _filename(r, "export.xlsx"), r.content

    # accounts
    def list_accounts(self, token: str) -> list[dict[str, Any]]:
        return self._request("GET", "/accounts/", token).json()

    def create_account(self, token: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/accounts/", token, json=payload).json()

    def delete_account(self, token: str, account_id: str) -> None:
        self._request("DELETE", f"/accounts/{account_id}", token, params={"confirm": "true"})
