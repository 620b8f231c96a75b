"""
NoteKeep Backend — Exception Hierarchy
======================================

What:  Application exceptions, one class per HTTP failure category.
How:   Each carries a client-safe `message` and a `context` dict for the
       server log. main.register_exception_handlers maps the class to a
       status code and an ErrorResponse body.

Exception Hierarchy:
    NoteKeepError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConfigurationError       → 500 Internal Server Error (fatal)
    └── DatabaseError            → 500 Internal Server Error

Business outcomes of the Note Store and the Token Issuer (not found,
invalid credentials, row-count anomalies) are return values. Routes turn
them into the exceptions above; services raise only for genuine faults.
"""

from typing import Any, Dict, Optional


class NoteKeepError(Exception):
    """
    Base exception for all NoteKeep application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 400s)
    """

    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.context = dict(context or {})
        super().__init__(self.message)


class ValidationError(NoteKeepError):
    """
    A note state the request schemas would have refused, reached a service
    by a direct call. `field` names the offending attribute.
    """

    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.field = field
        if field:
            self.context["field"] = field


class AuthenticationError(NoteKeepError):
    """
    No verified identity: missing, malformed, expired or foreign token, or
    rejected credentials at POST /api/token. The message never says which.
    """

    default_message = "Could not validate credentials"


class NotFoundError(NoteKeepError):
    """Missing resource. For notes this also covers notes of other users."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        else:
            message = f"The requested {resource} was not found"
        super().__init__(message, context)
        self.context.update(resource=resource, resource_id=resource_id)


class ConfigurationError(NoteKeepError):
    """
    Deployment mistake that must abort the request: no signing key, or a
    verified token without a numeric id under the configured claim name.
    """

    default_message = "Server is misconfigured"


class DatabaseError(NoteKeepError):
    """Store failure or a write that changed an unexpected number of rows."""

    default_message = "A database error occurred. Please try again later."
