from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from .config import get_settings
from .database import create_tables
from .exceptions import (
    ConflictError,
    ExhaustedError,
    IPAMError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .logger import configure_logging, get_logger
from .routers import networks_router, addresses_router

settings = get_settings()
logger = get_logger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ExhaustedError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create database tables
    create_tables()
    yield


app = FastAPI(
    title="IP Address Manager",
    description="""
## IP Address Manager API

Tracks networks (CIDR blocks with a reserved gateway) and the individual
addresses allocated from them, each bound to a hostname.

### Allocation rules
- The gateway and the base address of a block are never allocated
- The last address of a block is allocatable
- First-available allocation picks the lowest free address
- Hostnames are unique among allocated addresses of one network
- Released addresses keep their record (status `available`) and are reused first

### Errors
| Status | Meaning |
|--------|---------|
| 400 | Invalid input (malformed or incomplete body, bad address, gateway requested, address outside block) |
| 404 | Network or address record not found |
| 409 | Hostname or address already allocated, or network exhausted |
| 500 | Storage failure |
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(networks_router, prefix=settings.api_v1_prefix)
app.include_router(addresses_router, prefix=settings.api_v1_prefix)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies share the same 400 response as other validation failures."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse(
        status_code=ERROR_STATUS[ValidationError],
        content={"detail": "; ".join(problems), "error": ValidationError.kind},
    )


@app.exception_handler(IPAMError)
async def ipam_error_handler(request: Request, exc: IPAMError):
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "error": exc.kind},
    )


@app.get("/", tags=["Health"])
def root():
    """Health check endpoint."""
    return {
        "service": "IP Address Manager",
        "status": "healthy",
        "version": "1.0.0",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected",
    }


def run():
    """Run the API server using uvicorn."""
    import uvicorn

    configure_logging(settings.log_level)
    logger.info(f"Starting IPAM server on {settings.host}:{settings.port}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # loguru handles uvicorn's records
    )


def main():
    """Entry point for the API server."""
    run()


if __name__ == "__main__":
    main()
