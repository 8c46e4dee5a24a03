import logging
import logging.config
import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from afusocial.api.routes import router as api_router
from afusocial.config import get_settings
from afusocial.services import InvalidOperationError, NotFoundError


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "root": {
        "handlers": ["default"],
        "level": "INFO",
    },
    "loggers": {
        "afusocial.requests": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        }
    },
}


logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("afusocial.requests")

settings = get_settings()

app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


REQUEST_LOG_MAX_LENGTH = 80


def format_request_log_line(
    method: str, path: str, status_code: int, duration_ms: float, body: bytes | None = None
) -> str:
    """Build the one-line request summary, with the JSON body appended and cut to 80 chars."""

    line = f"{method} {path} {status_code} in {int(duration_ms)}ms"
    if body:
        line += f" :: {body.decode('utf-8', errors='replace')}"
    if len(line) > REQUEST_LOG_MAX_LENGTH:
        line = line[: REQUEST_LOG_MAX_LENGTH - 1] + "…"
    return line


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    if not request.url.path.startswith("/api"):
        return response

    body = None
    if response.headers.get("content-type", "").startswith("application/json"):
        body = b"".join([chunk async for chunk in response.body_iterator])
        response = Response(
            content=body,
            status_code=response.status_code,
            headers=response.headers,
        )
    duration_ms = (time.perf_counter() - started) * 1000
    request_logger.info(
        format_request_log_line(request.method, request.url.path, response.status_code, duration_ms, body)
    )
    return response


@app.exception_handler(NotFoundError)
async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidOperationError)
async def _invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.get("/health", tags=["system"])
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok", "environment": settings.environment}


app.include_router(api_router, prefix="/api")
