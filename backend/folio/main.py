"""
Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from folio import __version__
from folio.api.routes import (agent_tasks, analytics, blog, chat,
                              chat_settings, contact, content, functions,
                              health, metrics, modules, newsletter, pages,
                              projects)
from folio.core.config import get_settings
from folio.core.database import init_db
from folio.core.errors import FolioError
from folio.core.logging_config import LoggingConfig
from folio.core.middleware import LoggingContextMiddleware
from folio.core.middleware_metrics import MetricsMiddleware

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
    if settings.database_url.startswith("sqlite"):
        # SQLite has no migrations step; Postgres schema comes from Alembic
        init_db()
    yield
    logger.info(f"Shutting down {settings.app_name}...")


_settings = get_settings()

app = FastAPI(
    title=_settings.app_name,
    description="Portfolio site CMS with AI chat, page builder and content autopilot",
    version=__version__,
    lifespan=lifespan,
)

# Logging context first so every request gets a request id
app.add_middleware(LoggingContextMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FolioError)
async def folio_exception_handler(request: Request, exc: FolioError):
    """Domain errors: {error} for edge functions, {detail} for the REST API"""
    if request.url.path.startswith(functions.router.prefix):
        content = exc.to_body()
    else:
        content = {"detail": exc.message}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to log all unhandled errors"""
    if isinstance(exc, FastAPIHTTPException):
        raise exc

    error_msg = str(exc)
    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={
            "error": error_msg,
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": error_msg,
            "type": type(exc).__name__
        }
    )


# Include routers
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(projects.router)
app.include_router(pages.router)
app.include_router(blog.router)
app.include_router(content.blog_categories_router)
app.include_router(content.nav_links_router)
app.include_router(content.featured_router)
app.include_router(content.quick_actions_router)
app.include_router(chat_settings.router)
app.include_router(chat.router)
app.include_router(newsletter.router)
app.include_router(contact.router)
app.include_router(analytics.router)
app.include_router(modules.router)
app.include_router(agent_tasks.router)
app.include_router(functions.router)

_settings.media_path.mkdir(parents=True, exist_ok=True)
app.mount(_settings.media_base_url, StaticFiles(directory=str(_settings.media_path)), name="media")


@app.get("/api")
async def root():
    """Root API endpoint"""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "environment": settings.app_env,
    }
