# app/api/deps.py
from typing import Annotated
import logging

from fastapi import Depends, Header

from app.clients.auth_service import AuthServiceClient, get_auth_client
from app.core.config import Settings, get_settings
from app.db.mongo import get_db
from app.domain.errors import AuthenticationError, PermissionDeniedError
from app.domain.models.security import SecurityContext, SessionContext
from app.domain.repositories.product_repo import ProductRepo

logger = logging.getLogger(__name__)


# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    # Returns the MongoDB database instance (async)
    return db


def product_repo(
    db = Depends(mongo_db),
    settings: Settings = Depends(get_settings),
) -> ProductRepo:
    return ProductRepo(db, collection_name=settings.PRODUCTS_COLLECTION)


def auth_client() -> AuthServiceClient:
    return get_auth_client()


async def write_context(
    x_api_key: str | None = Header(default=None),
    client: AuthServiceClient = Depends(auth_client),
    settings: Settings = Depends(get_settings),
) -> SecurityContext:
    """
    Resolve the X-API-KEY header into a SecurityContext that holds the
    write permission. Missing/invalid key → 401, key without permission → 403.
    """
    if not x_api_key:
        raise AuthenticationError("Invalid or missing API Key.")
    ctx = await client.validate_api_key(x_api_key, settings.write_permission)
    if settings.write_permission not in ctx.permissions:
        logger.warning("api key identity=%s lacks permission %s", ctx.identity, settings.write_permission)
        raise PermissionDeniedError(f"This API key lacks the '{settings.write_permission}' permission.")
    return ctx


async def session_context(
    x_session_id: str | None = Header(default=None),
    x_client_subdomain: str | None = Header(default=None),
    client: AuthServiceClient = Depends(auth_client),
) -> SessionContext:
    """
    Lenient session resolution for read routes.
    - No session id: anonymous context (subdomain from X-Client-Subdomain if sent).
    - Session id without X-Client-Subdomain: 401.
    - Session id the session service rejects or reports inactive: 401.
    """
    subdomain = x_client_subdomain or None
    if not x_session_id:
        return SessionContext(subdomain=subdomain)

    if not subdomain:
        raise AuthenticationError("X-Client-Subdomain header is required when providing a session.")

    info = await client.validate_session(x_session_id)
    return SessionContext(uid=info.get("uid"), claims=info.get("claims") or {}, subdomain=subdomain)


RepoDep = Annotated[ProductRepo, Depends(product_repo)]
WriteCtxDep = Annotated[SecurityContext, Depends(write_context)]
SessionDep = Annotated[SessionContext, Depends(session_context)]
