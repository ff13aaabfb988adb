"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookloop.api.book_routes import router as books_router
from bookloop.api.circle_routes import router as circles_router
from bookloop.api.notification_routes import router as notifications_router
from bookloop.api.options_routes import router as options_router
from bookloop.api.recommendation_routes import router as recommendation_router
from bookloop.api.trade_routes import router as trades_router
from bookloop.api.user_routes import router as users_router
from bookloop.core.config import settings
from bookloop.domain.exceptions import BookLoopError, NotFoundError
from bookloop.infrastructure.database.connection import async_session_maker, init_db
from bookloop.infrastructure.database.repository import OptionsRepository
from bookloop.services.options_service import OptionsService

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_options() -> None:
    async with async_session_maker() as session:
        await OptionsService(OptionsRepository(session)).seed_defaults()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting BookLoop application")
    try:
        await init_db()
    except Exception:
        logger.critical("Database initialization failed", exc_info=True)
        raise
    logger.info("Database initialized")
    if settings.seed_default_options:
        await seed_options()
    yield
    logger.info("Shutting down BookLoop application")


app = FastAPI(
    title="BookLoop",
    description="Community book sharing: trades, reading circles and recommendations",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(books_router, prefix=settings.api_prefix)
app.include_router(circles_router, prefix=settings.api_prefix)
app.include_router(trades_router, prefix=settings.api_prefix)
app.include_router(notifications_router, prefix=settings.api_prefix)
app.include_router(options_router, prefix=settings.api_prefix)
app.include_router(recommendation_router, prefix=settings.api_prefix)


# ---------------------------------------------------------------------------
# Error bodies are always {"message": ...}
# ---------------------------------------------------------------------------
@app.exception_handler(BookLoopError)
async def domain_error_handler(request: Request, exc: BookLoopError) -> JSONResponse:
    code = status.HTTP_404_NOT_FOUND if isinstance(exc, NotFoundError) else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Only 404, 400 and 500 are exposed; e.g. 405 on a wrong method becomes 400.
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        code = status.HTTP_404_NOT_FOUND
    elif exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": "Server error"}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
