# app/domain/services/permissions.py
"""
Subdomain-scoped access control.

Pure functions over an explicit, immutable security context: nothing here
reads request state. Mutations are always checked against the subdomain
stored on the existing document, never against a value sent by the caller.
"""
from __future__ import annotations
import logging
from typing import Collection, FrozenSet, Optional

from app.domain.errors import AuthContextError, PermissionDeniedError
from app.domain.models.security import SecurityContext

logger = logging.getLogger(__name__)


def is_subdomain_allowed(allowed: Optional[Collection[str]], target: Optional[str]) -> bool:
    if not allowed or not target:
        return False
    return target in allowed


def allowed_subdomains_of(ctx: Optional[SecurityContext]) -> FrozenSet[str]:
    """Fail closed: a context without an authorized-subdomain set is an internal error."""
    if ctx is None or ctx.allowed_subdomains is None:
        logger.error("allowed_subdomains missing from security context (identity=%s)", getattr(ctx, "identity", None))
        raise AuthContextError("The security context does not carry the caller's authorized subdomains.")
    return ctx.allowed_subdomains


def require_subdomain(ctx: Optional[SecurityContext], target: Optional[str], *, action: str) -> None:
    """
    Raise unless the caller may `action` ("create", "modify") resources in `target`.
    """
    allowed = allowed_subdomains_of(ctx)
    if not is_subdomain_allowed(allowed, target):
        logger.warning("permission denied identity=%s action=%s subdomain=%r", ctx.identity, action, target)
        raise PermissionDeniedError(
            f"You do not have permission to {action} resources in this subdomain.",
        )
