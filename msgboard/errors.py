from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class MessageBoardError(Exception):
    """
    Base for every failure a request can end with.

    Each subclass maps to one HTTP status. The detail is shown to the
    client as-is, so it must never contain secrets.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(MessageBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class ConflictError(MessageBoardError):
    # Duplicate usernames are reported as a plain 400
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Username already taken"


class AuthenticationError(MessageBoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Login required"


class AuthorizationError(MessageBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed to modify this message"


class NotFoundError(MessageBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Message not found"


class PersistenceError(MessageBoardError):
    default_detail = "Database error"


class HashingError(MessageBoardError):
    default_detail = "Could not hash password"


async def message_board_error_handler(request: Request, exc: MessageBoardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed bodies and bad query parameters are 400, not FastAPI's 422.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Malformed request: " + _describe(exc)},
    )


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid input"


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(MessageBoardError, message_board_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
