import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger("storefront.errors")


class StorefrontError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(StorefrontError):
    status_code = 401
    default_message = "Authentication required"


class InvalidToken(StorefrontError):
    status_code = 400
    default_message = "Invalid or expired token"


class Forbidden(StorefrontError):
    status_code = 403
    default_message = "Forbidden"


class ValidationError(StorefrontError):
    status_code = 400
    default_message = "Invalid input"


class UploadRejected(StorefrontError):
    status_code = 400
    default_message = "Upload rejected"


class UploadRequired(StorefrontError):
    status_code = 400
    default_message = "An image file is required"


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class DuplicateEmail(StorefrontError):
    status_code = 400
    default_message = "Email already registered"


class InvalidCredentials(StorefrontError):
    status_code = 400
    default_message = "Invalid email or password"


class InternalError(StorefrontError):
    pass


def error_body(exc: StorefrontError) -> dict:
    return {"error": type(exc).__name__, "detail": exc.message}


def describe_first_error(errors) -> str:
    """Turn the first pydantic/FastAPI error entry into '<field>: <message>'."""
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    # drop the "body"/"query" location prefix FastAPI adds
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form")]
    field = ".".join(loc) or "input"
    return f"{field}: {first.get('msg', 'invalid value')}"


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError(describe_first_error(exc.errors()))
    return JSONResponse(status_code=err.status_code, content=error_body(err))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = InternalError()
    return JSONResponse(status_code=err.status_code, content=error_body(err))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
