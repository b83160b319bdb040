"""
Application error taxonomy.
Each error carries the HTTP status code the API layer answers with;
the message is shown to the user verbatim.
"""


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Input violates a field or cross-entity constraint."""
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    """Referenced entity is absent or outside the caller's scope."""
    status_code = 404


class ConflictError(AppError):
    """Uniqueness violation within a scope."""
    status_code = 409
