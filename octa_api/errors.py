# octa_api/errors.py
import functools
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    message = "Bad Request"


class Unauthorized(ApiError):
    status_code = 401
    message = "Unauthorized"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class InternalError(ApiError):
    pass


def store_operation(func):
    """
    Wrap a controller coroutine so that anything other than an ApiError
    (store failures, malformed ids, invalid batch entries) becomes InternalError.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ApiError:
            raise
        except Exception:
            logger.exception("%s failed", func.__qualname__)
            raise InternalError()
    return wrapper


async def _api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
