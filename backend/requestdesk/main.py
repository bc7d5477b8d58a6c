"""
RequestDesk - Main FastAPI Application

Employee request intake with AI triage, manager review queues and
requester notifications. Configures middleware, routes, and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config.settings import settings
from .api.routes import api_router
from .api.middleware import CorrelationIdMiddleware, register_error_handlers
from .repositories.mongo_client import create_indexes, close_connection, health_check
from .utils.logger import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)

VERSION = "1.0.0"


# =============================================================================
# Application Lifecycle
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup creates MongoDB indexes; shutdown closes the connection.
    """
    logger.info("Starting RequestDesk...")
    
    try:
        create_indexes()
    except Exception as e:
        logger.error(f"Failed to create indexes: {e}")
    
    if not settings.ai_enabled:
        logger.warning("AI_API_KEY not set, all requests will use the keyword classifier")
    
    logger.info("Application started successfully")
    
    yield
    
    logger.info("Shutting down...")
    close_connection()
    logger.info("Application shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="RequestDesk",
        description="HR request triage and review",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )
    
    _configure_middleware(application)
    register_error_handlers(application)
    _configure_routes(application)
    
    return application


def _configure_middleware(app: FastAPI) -> None:
    # allow_credentials must be False when allowing all origins
    allow_all = settings.cors_origins.strip() == "*"
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins_list,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )
    
    app.add_middleware(CorrelationIdMiddleware)


def _configure_routes(app: FastAPI) -> None:
    app.include_router(api_router, prefix="/api/v1")
    
    @app.get("/health", tags=["Health"])
    def health():
        """Application health including database connectivity."""
        mongo_health = health_check()
        return {
            "status": "healthy" if mongo_health.get("status") == "healthy" else "degraded",
            "version": VERSION,
            "environment": settings.environment,
            "ai_enabled": settings.ai_enabled,
            "mongo": mongo_health
        }
    
    @app.get("/", tags=["Health"])
    def root():
        return {
            "name": "RequestDesk",
            "version": VERSION,
            "docs": "/api/docs" if settings.debug else None
        }


app = create_app()
