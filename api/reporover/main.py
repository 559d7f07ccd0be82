from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import logging
import traceback
from reporover.core.config import settings
from reporover.core.database import init_db
from reporover.core.exceptions import RepoRoverException

# Import models to register them with SQLModel
import reporover.models  # noqa: F401

# Import API router
from reporover.api.v1 import api_router

logger = logging.getLogger(__name__)

app = FastAPI(title="RepoRover API", version="1.0.0")


# Add exception handler for validation errors to log details
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request input as 400 INVALID_INPUT."""
    errors = exc.errors()
    logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid input")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": message,
            "code": "INVALID_INPUT",
            "details": jsonable_encoder(errors, exclude={"input", "ctx"}) if errors else [],
        },
    )


# Add exception handler for custom application exceptions
@app.exception_handler(RepoRoverException)
async def reporover_exception_handler(request: Request, exc: RepoRoverException):
    """Render application exceptions as {"error", "code"} with their status."""
    logger.warning(
        f"Application exception on {request.method} {request.url.path}: "
        f"{type(exc).__name__} [{exc.code}]: {exc.message}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )


# Add global exception handler for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and answer with a 500."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    if settings.is_development:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": str(exc),
                "code": "INTERNAL_ERROR",
                "type": type(exc).__name__,
                "traceback": traceback.format_exc()
            },
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "An internal server error occurred. Please try again later.",
            "code": "INTERNAL_ERROR"
        },
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    init_db()


@app.get("/")
async def root():
    return {
        "message": "RepoRover API",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        }
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


# Include API router
app.include_router(api_router, prefix=settings.api_v1_prefix)
