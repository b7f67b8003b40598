from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taste_trail.shared.utils.logger import get_logger
from .exceptions import TasteTrailError, UserBanned

logger = get_logger(__name__)

AUTH_COOKIES = ("accessToken", "refreshToken")


def setup_exception_handlers(app: FastAPI):
    @app.exception_handler(TasteTrailError)
    async def domain_exception_handler(request: Request, exc: TasteTrailError):
        response = JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, **exc.details},
        )
        if isinstance(exc, UserBanned):
            # a banned client must not keep presenting stale credentials
            for cookie in AUTH_COOKIES:
                response.delete_cookie(cookie, path="/")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation failed", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
