"""FastAPI application factory."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wewatch.api.v1.router import api_router
from wewatch.config import get_settings
from wewatch.core.logging import get_logger, setup_logging
from wewatch.core.middleware import ObservabilityMiddleware

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """Human message for the first validation error.

    Validators raise ``ValueError("...")`` with the exact text the client
    should see; fall back to pydantic's message for type errors.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    msg = first.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _validation_message(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging()

    app = FastAPI(title="We Watch API", version="1.0.0", debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ObservabilityMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
