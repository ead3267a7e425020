"""Mock exam lifecycle FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from exam_lifecycle import __version__
from exam_lifecycle.config import get_settings
from exam_lifecycle.database import close_db, init_db
from exam_lifecycle.logging_config import (
    REQUEST_ID_HEADER,
    SERVICE_NAME,
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from exam_lifecycle.redis import close_redis, init_redis
from exam_lifecycle.routes.mock_exams import router as mock_exams_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: init DB + Redis on startup, cleanup on shutdown."""
    settings = get_settings()
    configure_logging(settings)

    logger.info("starting_database_init")
    await init_db()

    if settings.redis_enabled:
        await init_redis(settings.redis_url)
    else:
        logger.info("redis_disabled")

    logger.info("application_started", version=__version__)
    yield

    logger.info("shutting_down")
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Mock Exam Lifecycle",
    description="Mock exam scheduling with an enforced status lifecycle",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = bind_request_context(
        request.headers.get(REQUEST_ID_HEADER),
        method=request.method,
        path=request.url.path,
    )
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app.include_router(mock_exams_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": SERVICE_NAME}
