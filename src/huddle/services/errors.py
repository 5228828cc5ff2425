"""Service-layer errors.

Services raise these instead of HTTPException so they stay usable
outside a request (CLI, tests). Each carries a stable machine-readable
`code`; main.py maps the class to an HTTP status and renders
{"detail": {"code": ..., "message": ...}}.
"""


class ServiceError(Exception):
    """Base class for expected, client-facing failures."""

    status_code = 400

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidInputError(ServiceError):
    status_code = 400


class AuthError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409
