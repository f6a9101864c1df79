import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from vidshare import __version__
from vidshare.api.v1 import api_router
from vidshare.core.config import get_settings
from vidshare.core.exceptions import APIException, ServiceError, UpstreamFailure
from vidshare.schemas.common import ErrorDetail, ErrorResponse

settings = get_settings()
logger = logging.getLogger("vidshare")

app = FastAPI(
    title="VidShare Accounts API",
    version=__version__,
    description="User accounts, sessions and channels for VidShare",
    docs_url="/docs",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, error: dict) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(**error))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handle APIException and return standard error format."""
    return _error_response(exc.status_code, exc.detail["error"])


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map service failures to their HTTP status in the standard error format."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message} ({request.method} {request.url.path})")
    return _error_response(exc.status_code, exc.to_dict())


@app.exception_handler(OperationalError)
async def database_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """Database unreachable or timed out: report as a retryable upstream failure."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc.orig}")
    error = UpstreamFailure("Database is unavailable", code="DATABASE_UNAVAILABLE")
    return _error_response(error.status_code, error.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors and format them according to API contract."""
    details: dict[str, list[str]] = {}
    for error in exc.errors():
        # ["body", "password"] -> "password"
        field_path = error["loc"]
        field_name = str(field_path[-1] if len(field_path) > 1 else field_path[0])
        details.setdefault(field_name, []).append(error["msg"])

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"code": "VALIDATION_ERROR", "message": "Validation failed", "details": details},
    )


@app.get("/healthz", tags=["system"])
def healthz():
    """Health check endpoint."""
    return {
        "status": "ok",
        "env": settings.ENV,
        "version": __version__,
    }


app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vidshare.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
