# app/domain/models/security.py
from __future__ import annotations
from typing import Any, Dict, FrozenSet, Optional
from pydantic import BaseModel


class SecurityContext(BaseModel):
    """
    Identity resolved from a validated API key.
    `allowed_subdomains` stays None when the key service did not send it;
    the permission guard refuses to act on such a context.
    """
    identity: str
    allowed_subdomains: Optional[FrozenSet[str]] = None
    permissions: FrozenSet[str] = frozenset()

    model_config = {"frozen": True}


class SessionContext(BaseModel):
    """Caller resolved from X-Session-ID / X-Client-Subdomain. Every field may be absent."""
    uid: Optional[str] = None
    claims: Dict[str, Any] = {}
    subdomain: Optional[str] = None

    model_config = {"frozen": True}
