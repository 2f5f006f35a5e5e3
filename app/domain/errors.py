# app/domain/errors.py
"""
Error taxonomy for the products API.

Services and dependencies raise these; app.main translates them once, at the
HTTP boundary, into `{"success": false, "error": ..., "details": ...}` with the
status code carried by the class.
"""
from __future__ import annotations


class ProductsAPIError(Exception):
    status_code: int = 500
    error: str = "Internal error"

    def __init__(self, details: str = "", *, error: str | None = None, extra: dict | None = None):
        super().__init__(details or error or self.error)
        self.details = details
        if error is not None:
            self.error = error
        self.extra = extra or {}

    def to_body(self) -> dict:
        body = {"success": False, "error": self.error, "details": self.details or self.error}
        body.update(self.extra)
        return body


class ValidationError(ProductsAPIError):
    status_code = 400
    error = "Invalid request"


class AuthenticationError(ProductsAPIError):
    status_code = 401
    error = "Authentication required"


class PermissionDeniedError(ProductsAPIError):
    status_code = 403
    error = "Permission denied"


class NotFoundError(ProductsAPIError):
    status_code = 404
    error = "Not found"


class ConflictError(ProductsAPIError):
    status_code = 409
    error = "Conflict"


class AuthContextError(ProductsAPIError):
    """The security context is missing or malformed; never default to allow."""
    status_code = 500
    error = "Could not verify user permissions."


class StoreError(ProductsAPIError):
    status_code = 500
    error = "Document store failure"


class AuthServiceUnavailableError(ProductsAPIError):
    status_code = 503
    error = "Authentication service unavailable"
