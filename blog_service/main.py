import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from blog_service import __version__
from blog_service.config import settings
from blog_service.database import engine
from blog_service.exceptions import BlogServiceError, UnauthorizedError
from blog_service.middleware import TimingMiddleware
from blog_service.routers import comments, posts, users

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Blog service %s starting (env=%s)", __version__, settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Blog Service",
    description="Posts, comments, tags, categories and likes with author-only mutation",
    version=__version__,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error translation
@app.exception_handler(BlogServiceError)
async def blog_service_error_handler(request: Request, exc: BlogServiceError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "error": exc.detail},
        headers=headers,
    )


def _internal_error(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": detail},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _internal_error(str(exc) if settings.EXPOSE_ERROR_DETAILS else "Database error")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _internal_error(str(exc) if settings.EXPOSE_ERROR_DETAILS else "Unexpected error")


# Routers
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(users.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": __version__}
