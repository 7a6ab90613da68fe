"""Main FastAPI application with modularized routes."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.database import init_db
from api.errors import ExamEngineError
from api.routes import auth, submissions, tests, users
from api.services.cleanup_service import schedule_session_cleanup
from core.logging_setup import setup_console_logging

setup_console_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Exam Engine API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ExamEngineError)
async def exam_engine_error_handler(request: Request, exc: ExamEngineError) -> JSONResponse:
    """Translate domain errors into JSON responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and schedule cleanup tasks on startup."""
    init_db()
    schedule_session_cleanup()


# Include routers
app.include_router(auth.router)
app.include_router(tests.router)
app.include_router(submissions.router)
app.include_router(users.router)
