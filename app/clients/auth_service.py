# app/clients/auth_service.py
"""
HTTP adapter for the two sibling auth services.

- API-key service:  POST {APIKEY_SERVICE_URL}/validate
    body    {"api_key": "...", "permission": "write:products"}
    answer  {"identity": "...", "active": true, "permissions": [...], "allowed_subdomains": [...]}
- Session service:  GET {SESSION_SERVICE_URL}/sessions/{session_id}
    answer  {"uid": "...", "active": true, "claims": {...}}

4xx answers mean the credential was rejected; transport errors and 5xx mean
the service could not be asked.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import get_settings
from app.domain.errors import AuthenticationError, AuthServiceUnavailableError
from app.domain.models.security import SecurityContext

logger = logging.getLogger(__name__)

_http: httpx.AsyncClient | None = None


class AuthServiceClient:
    def __init__(self, http: httpx.AsyncClient, apikey_url: str, session_url: str):
        self.http = http
        self.apikey_url = apikey_url.rstrip("/")
        self.session_url = session_url.rstrip("/")

    async def _call(self, method: str, url: str, *, service: str, reject_msg: str, **kw) -> Dict[str, Any]:
        try:
            res = await self.http.request(method, url, **kw)
        except httpx.HTTPError as e:
            logger.error("%s unreachable: %s", service, e)
            raise AuthServiceUnavailableError(f"{service} unreachable: {e}") from e

        if 400 <= res.status_code < 500:
            logger.info("%s rejected credential status=%s", service, res.status_code)
            raise AuthenticationError(reject_msg)
        if res.status_code >= 500:
            logger.error("%s failed status=%s", service, res.status_code)
            raise AuthServiceUnavailableError(f"{service} answered {res.status_code}")

        try:
            body = res.json()
        except ValueError as e:
            raise AuthServiceUnavailableError(f"{service} sent a non-JSON answer") from e
        if not isinstance(body, dict):
            raise AuthServiceUnavailableError(f"{service} sent an unexpected answer")
        return body

    async def validate_api_key(self, api_key: str, permission: str) -> SecurityContext:
        body = await self._call(
            "POST", f"{self.apikey_url}/validate",
            service="api-key service",
            reject_msg="Invalid or missing API Key.",
            json={"api_key": api_key, "permission": permission},
        )
        if not body.get("active", False):
            raise AuthenticationError("Invalid or missing API Key.")

        raw_subdomains = body.get("allowed_subdomains")
        # Keep None when absent or malformed: the permission guard fails closed on it
        allowed: Optional[frozenset[str]] = None
        if isinstance(raw_subdomains, list):
            allowed = frozenset(s for s in raw_subdomains if isinstance(s, str))
        else:
            logger.warning("api-key service answer has no usable allowed_subdomains (got %s)",
                           type(raw_subdomains).__name__)

        permissions = body.get("permissions") or []
        return SecurityContext(
            identity=str(body.get("identity") or body.get("key_id") or ""),
            allowed_subdomains=allowed,
            permissions=frozenset(p for p in permissions if isinstance(p, str)),
        )

    async def validate_session(self, session_id: str) -> Dict[str, Any]:
        body = await self._call(
            "GET", f"{self.session_url}/sessions/{session_id}",
            service="session service",
            reject_msg="Invalid or expired session.",
        )
        if not body.get("active", False):
            raise AuthenticationError("Invalid or expired session.")
        claims = body.get("claims")
        return {"uid": body.get("uid"), "claims": claims if isinstance(claims, dict) else {}}


async def connect():
    global _http
    settings = get_settings()
    _http = httpx.AsyncClient(timeout=settings.auth_timeout_s)
    logger.info("Auth services client ready apikey=%s session=%s",
                settings.APIKEY_SERVICE_URL, settings.SESSION_SERVICE_URL)


async def disconnect():
    global _http
    if _http:
        await _http.aclose()
    _http = None


def get_auth_client() -> AuthServiceClient:
    assert _http is not None, "Auth HTTP client not initialized"
    settings = get_settings()
    return AuthServiceClient(_http, settings.APIKEY_SERVICE_URL, settings.SESSION_SERVICE_URL)
