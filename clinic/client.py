"""
HTTP client for the clinic API.

Every call carries the same fixed timeout: it only bounds how long a caller
waits, the server gives no guarantee of its own.
"""
from __future__ import annotations

from typing import Any

import requests

from .config import ADMIN_COOKIE_NAME, ADMIN_COOKIE_VALUE, API_BASE, CLIENT_TIMEOUT_SECONDS


class ClinicApiError(Exception):
    def __init__(self, status: int, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(f"{status} {message}")
        self.status = status
        self.message = message
        self.code = code
        self.details = details


def _body(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return None


class ClinicClient:
    def __init__(
        self,
        base_url: str = API_BASE,
        timeout: float = CLIENT_TIMEOUT_SECONDS,
        admin: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()
        if admin:
            self.http.cookies.set(ADMIN_COOKIE_NAME, ADMIN_COOKIE_VALUE)

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        return self.http.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)

    def _public(self, method: str, path: str, **kwargs: Any) -> Any:
        r = self._request(method, path, **kwargs)
        body = _body(r)
        if r.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            raise ClinicApiError(r.status_code, message or r.reason or "Request failed")
        return body

    # Public

    def list_patients(self, name: str | None = None) -> list[dict]:
        return self._public("GET", "/api/patients", params={"name": name} if name else None)

    def list_therapists(self, name: str | None = None, specialty: str | None = None) -> list[dict]:
        params = {k: v for k, v in {"name": name, "specialty": specialty}.items() if v}
        return self._public("GET", "/api/therapists", params=params or None)

    def list_sessions(self, search: str | None = None, status: str | None = None, sort_order: str = "asc") -> list[dict]:
        """Public session listing; the server's 404-on-empty comes back as []."""
        params = {k: v for k, v in {"search": search, "status": status, "sortOrder": sort_order}.items() if v}
        try:
            return self._public("GET", "/api/sessions", params=params)
        except ClinicApiError as e:
            if e.status == 404:
                return []
            raise

    def update_session_status(self, session_id: int, status: str) -> dict:
        return self._public("PATCH", f"/api/sessions/{session_id}", json={"status": status})

    # Admin (envelope)

    def _admin(self, method: str, path: str, payload: dict | None = None) -> Any:
        r = self._request(method, f"/api/admin{path}", json=payload)
        body = _body(r)
        if not isinstance(body, dict):
            raise ClinicApiError(r.status_code, r.reason or "Invalid response")
        if body.get("success"):
            return body.get("data")

        error = body.get("error") or {}
        raise ClinicApiError(
            r.status_code,
            error.get("message") or "Request failed",
            error.get("code"),
            error.get("details"),
        )

    def admin_get(self, path: str) -> Any:
        return self._admin("GET", path)

    def admin_post(self, path: str, payload: dict) -> Any:
        return self._admin("POST", path, payload)

    def admin_put(self, path: str, payload: dict) -> Any:
        return self._admin("PUT", path, payload)

    def admin_delete(self, path: str) -> Any:
        return self._admin("DELETE", path)
