class RootPilotError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RootPilotError):
    status_code = 400
    default_message = "Invalid input data"


class AuthenticationError(RootPilotError):
    status_code = 401
    default_message = "Access token required"


class InvalidTokenError(RootPilotError):
    status_code = 403
    default_message = "Invalid or expired token"


class AccessDeniedError(RootPilotError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(RootPilotError):
    status_code = 404
    default_message = "Not found"


class ConflictError(RootPilotError):
    status_code = 400
    default_message = "Resource already exists"


class InternalError(RootPilotError):
    pass
