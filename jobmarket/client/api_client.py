"""requests-based client for the Job Market API.

Keeps the token pair in a CredentialStore, sends the access token as a
bearer header, and on a 401 spends the refresh token once before giving up.
"""
from __future__ import annotations

from typing import Any

import requests

from jobmarket.client.hints import read_display_hint
from jobmarket.client.token_store import CredentialStore
from jobmarket.core.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: str, code: str | None = None) -> None:
        super().__init__(f"{status_code} {code or ''} {detail}".strip())
        self.status_code = status_code
        self.detail = detail
        self.code = code


def _raise_for_response(resp: requests.Response) -> None:
    if resp.ok:
        return
    try:
        body = resp.json()
    except ValueError:
        body = {}
    detail = body.get("detail") if isinstance(body, dict) else None
    code = body.get("code") if isinstance(body, dict) else None
    raise ApiError(resp.status_code, str(detail or resp.reason or "Request failed"), code)


class JobMarketClient:
    def __init__(
        self,
        base_url: str,
        store: CredentialStore | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.store = store if store is not None else CredentialStore()
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    # ============================================================
    # LOW LEVEL
    # ============================================================

    def request(self, method: str, path: str, *, auth: bool = True, **kwargs: Any) -> Any:
        if auth:
            self._refresh_if_expiring()
        resp = self._send(method, path, auth=auth, **kwargs)

        if resp.status_code == 401 and auth and self.store.get_refresh_token():
            if self.refresh():
                resp = self._send(method, path, auth=auth, **kwargs)

        _raise_for_response(resp)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def _send(self, method: str, path: str, *, auth: bool, **kwargs: Any) -> requests.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        token = self.store.get_access_token() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return self.session.request(
            method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
        )

    def _refresh_if_expiring(self) -> None:
        hint = read_display_hint(self.store.get_access_token())
        if hint is not None and hint.is_expiring_soon() and self.store.get_refresh_token():
            self.refresh()

    # ============================================================
    # SESSION
    # ============================================================

    def _store_pair(self, body: dict) -> dict:
        self.store.save(body["access_token"], body.get("refresh_token"))
        return body

    def register(self, **payload: Any) -> dict:
        return self._store_pair(self.request("POST", "/api/auth/register", auth=False, json=payload))

    def login(self, phone: str, password: str) -> dict:
        body = self.request("POST", "/api/auth/login", auth=False, json={"phone": phone, "password": password})
        return self._store_pair(body)

    def refresh(self) -> bool:
        """Spend the stored refresh token. On failure the store is cleared."""
        refresh_token = self.store.get_refresh_token()
        if not refresh_token:
            return False
        resp = self._send("POST", "/api/auth/refresh", auth=False, json={"refresh_token": refresh_token})
        if not resp.ok:
            log.info("Token refresh rejected (%s), clearing stored credentials", resp.status_code)
            self.store.clear()
            return False
        self._store_pair(resp.json())
        return True

    def logout(self) -> None:
        refresh_token = self.store.get_refresh_token()
        try:
            if refresh_token:
                self.request("POST", "/api/auth/logout", auth=False, json={"refresh_token": refresh_token})
        finally:
            self.store.clear()

    def me(self) -> dict | None:
        return self.request("GET", "/api/auth/me")["user"]

    # ============================================================
    # RESOURCES
    # ============================================================

    def search_jobs(self, **filters: Any) -> dict:
        params = {k: v for k, v in filters.items() if v is not None}
        return self.request("GET", "/api/jobs", auth=False, params=params)

    def get_job(self, job_id: int) -> dict:
        return self.request("GET", f"/api/jobs/{job_id}")

    def create_job(self, **payload: Any) -> int:
        return self.request("POST", "/api/dashboard/jobs", json=payload)["job_id"]

    def apply(self, job_id: int) -> int:
        return self.request("POST", "/api/applications", json={"job_position_id": job_id})["application_id"]

    def has_applied(self, job_id: int) -> bool:
        return self.request("GET", "/api/applications/check", params={"job_id": job_id})["has_applied"]

    def my_applications(self, status: str | None = None) -> list[dict]:
        params = {"status": status} if status else None
        return self.request("GET", "/api/dashboard/applications", params=params)

    def toggle_favorite(self, job_id: int) -> bool:
        return self.request("POST", "/api/favorites/toggle", json={"job_id": job_id})["is_favorite"]

    def is_favorite(self, job_id: int) -> bool:
        return self.request("GET", "/api/favorites", params={"job_id": job_id})["is_favorite"]
