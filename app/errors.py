# app/errors.py
"""
Error kinds raised by the service layer.

Every error carries a user-facing message; the FastAPI exception handler in
app.main turns it into ``{"detail": message}`` with ``status_code``.
"""


class ApiError(Exception):
    """Base class for errors that are safe to show to API clients."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ApiError):
    """Raised when a bill, product or customer looked up by id is absent."""

    status_code = 404


class InvalidReferenceError(ApiError):
    """Raised when a supplied foreign key (customer, product, bill) does not resolve."""

    status_code = 400


class ConflictError(ApiError):
    """Raised on uniqueness violations and when a concurrent transaction wins."""

    status_code = 409


class InvalidDataError(ApiError):
    """Raised for malformed input the service rejects before touching storage."""

    status_code = 400


class OperationCancelledError(ApiError):
    """Raised when the caller's deadline passes while an operation is in flight."""

    status_code = 503


class TransientStorageError(ApiError):
    """Raised at startup when the database stays unreachable after all retries."""

    status_code = 503
