import fcntl
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_backend.config import Settings, settings as default_settings
from todo_backend.database import build_engine, build_sessionmaker, init_models
from todo_backend.logging_setup import configure_logging
from todo_backend.middleware import BodySizeLimitMiddleware
from todo_backend.routers.auth import router as auth_router
from todo_backend.routers.tasks import router as tasks_router
from todo_backend.routers.users import router as users_router
from todo_backend.services.scheduler import setup_scheduler
from todo_backend.utils.email import Mailer
from todo_backend.utils.security import configure_hashing

logger = logging.getLogger(__name__)

SCHEDULER_LOCK_FILE = "/tmp/todo_backend_scheduler.lock"


def _acquire_scheduler_lock():
    # Only the first worker to grab the lock runs the scheduler
    lock_fd = open(SCHEDULER_LOCK_FILE, "w")
    try:
        fcntl.flock(lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        lock_fd.close()
        return None
    return lock_fd


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    engine = build_engine(settings.async_database_url)
    await init_models(engine)
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.mailer = Mailer(settings)

    scheduler = None
    lock_fd = None
    if settings.ENABLE_SCHEDULER:
        lock_fd = _acquire_scheduler_lock()
        if lock_fd:
            logger.info("[PROCESS %d] Acquired scheduler lock.", os.getpid())
            scheduler = setup_scheduler(app.state.sessionmaker, settings.OTP_PURGE_INTERVAL_MINUTES)
        else:
            logger.info("[PROCESS %d] Another worker is running the scheduler. Skipping.", os.getpid())

    yield

    if scheduler:
        scheduler.shutdown(wait=True)
    if lock_fd:
        fcntl.flock(lock_fd, fcntl.LOCK_UN)
        lock_fd.close()
    await engine.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Malformed JSON body"
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = loc[-1] if loc else "body"
    if first.get("type") == "missing":
        return f"{field} is required"
    return f"Invalid {field}: {first.get('msg')}"


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    configure_hashing(settings.BCRYPT_ROUNDS)

    app = FastAPI(
        lifespan=lifespan,
        title="To-Do API",
        description="To-do lists with email verification and password reset",
        version="1.0.0",
    )
    app.state.settings = settings

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.MAX_BODY_BYTES)

    # Any origin may call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    # Global exception handler to ensure CORS headers on failure
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("CRITICAL ERROR on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal Server Error"},
            headers={"Access-Control-Allow-Origin": "*"},
        )

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(tasks_router)

    @app.get("/")
    def root():
        return {"message": "To-Do API running"}

    return app


app = create_app()


def run():
    uvicorn.run(
        "todo_backend.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
