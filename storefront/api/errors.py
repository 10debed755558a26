# storefront/api/errors.py
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.domain.errors import APIError
from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error_body(message: str, exc: Exception) -> dict:
    body = {"success": False, "message": message}
    if settings.APP_ENV == "development":
        body["stack"] = "".join(traceback.format_exception(exc))
    return body


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}" for err in exc.errors()
    )
    logger.info(f"{request.method} {request.url.path} rejected: {details}")
    return JSONResponse(status_code=400, content=_error_body(f"Invalid input - {details}", exc))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=_error_body("Internal Server Error", exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
