"""Error kinds raised by services and rendered by the HTTP layer.

Each error carries the HTTP status it maps to and knows how to render
its JSON body. Auth endpoints report under the ``error`` key, the
question bank endpoints under ``message``; store failures add the
underlying driver message as ``error``.
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500

    def __init__(self, message: str, key: str = "message", detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.detail = detail

    def to_body(self) -> Dict[str, Any]:
        body = {self.key: self.message}
        if self.detail is not None:
            body["error"] = self.detail
        return body


class ValidationError(ServiceError):
    """Missing or malformed input."""
    status_code = 400


class DuplicateError(ServiceError):
    """Registration for an email that already exists."""
    status_code = 400


class InvalidCredentials(ServiceError):
    """Login failure; deliberately says nothing about which part was wrong."""
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class StoreError(ServiceError):
    """Any failure reported by the underlying database."""
    status_code = 500
