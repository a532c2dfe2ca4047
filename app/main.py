"""
Blog API - FastAPI Application
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from app.core.config import Settings, settings as default_settings
from app.core.database import Database, init_db
from app.core.exceptions import register_exception_handlers
from app.services.storage_service import LocalStorageService, PUBLIC_PREFIX

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None
) -> FastAPI:
    """
    Build the application

    Args:
        settings: Configuration (defaults to the environment-loaded settings)
        database: Store handle (defaults to one built from ``DATABASE_URL``)

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    configure_logging(settings)

    if database is None:
        database = Database(settings.DATABASE_URL, echo=settings.DEBUG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app.state.database, app.state.settings)
        yield
        app.state.database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description="REST API for a blogging platform: users, posts, threaded comments and likes",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = database
    app.state.storage = LocalStorageService(settings)

    register_exception_handlers(app)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(upload_dir)), name="uploads")

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint - health check"""
        return {
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": "1.0.0",
            "environment": settings.APP_ENV
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "environment": settings.APP_ENV
        }

    @app.get("/health/db", tags=["Health"])
    async def db_health_check(request: Request):
        """Database connection health check"""
        result = {"connection_test": False, "error": None}
        try:
            with request.app.state.database.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                result["connection_test"] = True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            result["error"] = "Database unavailable"
        return result

    # Import routers
    from app.api import auth, users, posts, comments, admin

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(posts.router, prefix="/api", tags=["Posts"])
    app.include_router(comments.router, prefix="/api", tags=["Comments"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG
    )
