from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from starterblog.core.config import Settings, settings
from starterblog.core.exceptions import register_exception_handlers
from starterblog.core.storage import FileStorage, LocalStorage, create_storage
from starterblog.db.init_db import create_all_tables
from starterblog.db.session import Database
from starterblog.middleware.auth_logging import AuthLoggingMiddleware
from starterblog.middleware.request_logging import RequestLoggingMiddleware
from starterblog.modules.auth.api.router import router as auth_router
from starterblog.modules.posts.api.router import router as posts_router
from starterblog.modules.user_management.api.router import router as user_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")


def create_app(
    app_settings: Optional[Settings] = None,
    storage: Optional[FileStorage] = None,
) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_settings.validate_runtime_config()
        logger.info(f"Starting server in {app_settings.ENVIRONMENT} mode")

        database = Database(app_settings.DATABASE_URL)
        try:
            database.check_connection()
            create_all_tables(database.engine)
        except Exception:
            logger.exception("Database initialization failed. Check DATABASE_URL.")
            database.dispose()
            raise
        app.state.db = database

        if isinstance(app.state.storage, LocalStorage):
            app.state.storage.directory.mkdir(parents=True, exist_ok=True)

        yield

        database.dispose()
        logger.info("Server shut down")

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        openapi_url=f"{app_settings.API_PREFIX}/openapi.json",
        debug=app_settings.DEBUG,
        description="Blogging backend: authors, posts and thumbnails",
        version=app_settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.storage = storage if storage is not None else create_storage(app_settings)

    register_exception_handlers(app)

    # Add middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(AuthLoggingMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=app_settings.BACKEND_CORS_METHODS,
        allow_headers=app_settings.BACKEND_CORS_HEADERS,
    )

    # Uploaded avatars and thumbnails are served straight from disk
    if app_settings.STORAGE_BACKEND == "local":
        app.mount(
            app_settings.UPLOADS_URL_PATH,
            StaticFiles(directory=Path(app_settings.UPLOAD_DIRECTORY), check_dir=False),
            name="uploads",
        )

    # Register API routers
    api_prefix = app_settings.API_PREFIX
    app.include_router(auth_router, prefix=f"{api_prefix}/users", tags=["authentication"])
    app.include_router(user_router, prefix=f"{api_prefix}/users", tags=["users"])
    app.include_router(posts_router, prefix=f"{api_prefix}/posts", tags=["posts"])

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to StarterBlog",
            "version": app_settings.VERSION,
            "environment": app_settings.ENVIRONMENT,
            "documentation": "/docs" if app_settings.DEBUG else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("starterblog.main:app", host="0.0.0.0", port=8000, reload=True)
