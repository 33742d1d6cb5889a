"""FastAPI Application Entry Point"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from rbac_tools.api.exception_handlers import register_exception_handlers
from rbac_tools.api.middleware import (
    RequestIDMiddleware,
    LoggingMiddleware,
    ErrorHandlingMiddleware,
    limiter
)
from rbac_tools.api.v1 import health, rbac
from rbac_tools.core.config import settings
from rbac_tools.core.logging_config import get_logger
from rbac_tools.rbac.catalog import CatalogRegistry


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: build the role catalogs on startup"""
    if getattr(app.state, "catalogs", None) is None:
        app.state.catalogs = CatalogRegistry.from_settings(settings)

    if settings.PRELOAD_CATALOGS:
        loaded = await app.state.catalogs.preload()
        logger.info(
            "application_started",
            environment=settings.ENVIRONMENT,
            catalogs={system.value: ok for system, ok in loaded.items()}
        )
    yield
    logger.info("application_stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

# Add rate limiter state
app.state.limiter = limiter

register_exception_handlers(app)

# Add middleware in correct order (LIFO - last added is executed first)
# Order: CORS -> Request ID -> Logging -> Error Handler

# 1. Error Handling Middleware (innermost - catches all errors)
app.add_middleware(ErrorHandlingMiddleware)

# 2. Logging Middleware
app.add_middleware(LoggingMiddleware)

# 3. Request ID Middleware (must wrap logging)
app.add_middleware(RequestIDMiddleware)

# 4. CORS Middleware (outermost - handles preflight requests first)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Include routers
app.include_router(health.router)
app.include_router(rbac.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": settings.APP_NAME, "version": settings.APP_VERSION}
