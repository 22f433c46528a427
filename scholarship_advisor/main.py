import logging
from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scholarship_advisor.routes import auth, scholarship, student
from scholarship_advisor.db.base import Base
from scholarship_advisor.db.sessions import engine, SessionLocal
from scholarship_advisor.core.config import settings
from scholarship_advisor.core.errors import AdvisorError, StorageError
from scholarship_advisor.services.snapshot import import_snapshot_file

# Import all models to ensure they're registered with Base
import scholarship_advisor.models  # noqa: F401

logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Student academic records, scholarship eligibility and recommendations"
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router)
app.include_router(student.router)
app.include_router(scholarship.router)


@app.exception_handler(AdvisorError)
async def advisor_error_handler(request: Request, exc: AdvisorError):
    if isinstance(exc, StorageError):
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "error": exc.category},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Malformed request body", "error": "validation_error"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error", "error": "error"},
    )


@app.on_event("startup")
def startup_event():
    logger.info("%s v%s starting", settings.APP_NAME, settings.APP_VERSION)
    if settings.LEGACY_DATA_FILE:
        db = SessionLocal()
        try:
            import_snapshot_file(db, Path(settings.LEGACY_DATA_FILE))
        except StorageError:
            logger.exception("Could not import %s", settings.LEGACY_DATA_FILE)
        finally:
            db.close()


@app.get("/")
def root():
    return {"success": True, "message": "Backend is running", "status": "healthy"}


@app.get("/health")
def health():
    return {"status": "ok"}
