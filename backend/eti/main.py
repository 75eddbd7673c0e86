import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from eti.core.config import settings
from eti.core.errors import AnalysisError, ConfigurationError, ValidationGap
from eti.db.base import Base
from eti.db.session import SessionLocal, engine

# Import all models so SQLAlchemy can discover them for table creation
from eti.models import CandidateRecord, JobRecord  # noqa: F401
from eti.services.record_store import (
    CANDIDATES,
    JOBS,
    DisabledRecordStore,
    FallbackRecordStore,
    RecordStore,
    SqlRecordStore,
)
from eti.services.repository import RecordRepository

# Import API router
from eti.api.api import api_router

logger = logging.getLogger("eti")

ANALYSIS_FAILED_MESSAGE = "Analysis failed. Please try again."


def build_store() -> RecordStore:
    """Live SQL store, or a disabled one when the store is switched off or unreachable."""
    if not settings.STORE_ENABLED:
        logger.warning("STORE_ENABLED is off - running on demo data")
        return DisabledRecordStore()

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.warning("Record store unreachable (%s) - running on demo data", e)
        return DisabledRecordStore()

    return SqlRecordStore(SessionLocal)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and attach the repository on startup."""
    repository = RecordRepository(FallbackRecordStore(build_store()))
    repository.attach()
    app.state.repository = repository
    yield
    repository.detach()


app = FastAPI(
    title=settings.APP_NAME,
    description="Compliance, OSINT and job matching for HR outsourcing",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS Middleware - allowlist from env (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.BACKEND_CORS_ORIGINS.split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


# ============== Error Handlers ==============


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "AI service is not configured", "error": "configuration"},
    )


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    logger.error("Analysis error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": ANALYSIS_FAILED_MESSAGE, "error": "analysis"},
    )


@app.exception_handler(ValidationGap)
async def validation_gap_handler(request: Request, exc: ValidationGap):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "error": "validation"},
    )


# ============== Root Endpoints ==============


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {"message": f"Welcome to {settings.APP_NAME} API"}


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    repository = getattr(request.app.state, "repository", None)
    store = {
        "ready": bool(repository and repository.ready),
        "candidates": repository.mode(CANDIDATES) if repository else None,
        "jobs": repository.mode(JOBS) if repository else None,
    }
    return {"status": "healthy", "store": store}


# Include API router with /api/v1 prefix
app.include_router(api_router, prefix="/api/v1")
