"""Domain errors raised by services and mapped to HTTP responses in main."""
from typing import Any, List, Optional


class LedgerError(Exception):
    """Base class for workflow errors."""
    status_code: int = 500
    default_detail: str = "Internal error"

    def __init__(self, detail: Optional[str] = None, errors: Optional[List[Any]] = None):
        self.detail = detail or self.default_detail
        self.errors = errors or []
        super().__init__(self.detail)


class ValidationError(LedgerError):
    """Malformed or out-of-range input."""
    status_code = 400
    default_detail = "Invalid request"

    def __init__(self, detail: Optional[str] = None, field: Optional[str] = None):
        errors = [{"field": field, "message": detail}] if field else None
        super().__init__(detail, errors)


class AccessDenied(LedgerError):
    """Principal lacks scope for the targeted society or entity."""
    status_code = 403
    default_detail = "Access denied"


class Forbidden(AccessDenied):
    """Role-specific denial carrying a user-facing reason."""
    default_detail = "Forbidden"


class NotFound(LedgerError):
    status_code = 404
    default_detail = "Not found"


class Conflict(LedgerError):
    status_code = 409
    default_detail = "Conflict"


class UpstreamFailure(LedgerError):
    """A blocking collaborator (blob store, identity) failed."""
    status_code = 502
    default_detail = "Upstream service failed"
