"""Error taxonomy and the handlers that render every failure as {"message": ...}."""
import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger("uvicorn.error")


class ValidationError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class ConflictError(HTTPException):
    def __init__(self, message: str = "Email or username already in use."):
        super().__init__(status_code=409, detail=message)


class InvalidCredentials(HTTPException):
    def __init__(self):
        super().__init__(status_code=401, detail="Invalid credentials.")


class Unauthenticated(HTTPException):
    def __init__(self, message: str = "Not authenticated."):
        super().__init__(status_code=401, detail=message)


class Unauthorized(HTTPException):
    def __init__(self, message: str = "Not authorized, no token provided"):
        super().__init__(status_code=401, detail=message)


class NotFound(HTTPException):
    def __init__(self, message: str = "Not found."):
        super().__init__(status_code=404, detail=message)


class AlreadyVerified(HTTPException):
    def __init__(self):
        super().__init__(status_code=400, detail="Email is already verified.")


class InvalidOrExpiredCode(HTTPException):
    def __init__(self):
        super().__init__(status_code=400, detail="Invalid or expired verification code.")


class TooManyRequests(HTTPException):
    def __init__(self, retry_after: int):
        super().__init__(
            status_code=429,
            detail="Too many requests from this IP, please try again after 15 minutes",
            headers={"Retry-After": str(retry_after)},
        )


class InternalError(HTTPException):
    def __init__(self, message: str = "Internal server error."):
        super().__init__(status_code=500, detail=message)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    err = errors[0]
    if err.get("type") == "missing":
        field = str(err.get("loc", ["", "field"])[-1])
        return f"{field} is required."
    msg = str(err.get("msg") or "Invalid request.")
    # Messages raised from our own validators come through as "Value error, <message>".
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return msg


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        log.error("HTTP %s: %s - %s", exc.status_code, exc.detail, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": _first_validation_message(exc)})


async def general_exception_handler(request: Request, exc: Exception):
    log.error("Unexpected error: %s - %s", exc, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error."})
