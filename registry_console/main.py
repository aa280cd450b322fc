import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from registry_console.core.config import settings
from registry_console.core.utils.logging_config import init_application_logging
from registry_console.web import views
from registry_console.web.context import ConsoleContext

logger = logging.getLogger("registry_console.main")


def create_app(console: Optional[ConsoleContext] = None) -> FastAPI:
    """Build the console application around ``console``.

    Without an explicit context one is wired from the global settings. The
    persisted session is restored when the application starts.
    """
    console = console or ConsoleContext.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = console.session.restore()
        logger.info(f"Console started, session {state.value}")
        try:
            yield
        finally:
            await console.aclose()
            logger.info("Console stopped")

    app = FastAPI(
        title=console.settings.APP_NAME,
        description="Session and orchestration console for the land registry service",
        version=console.settings.VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.console = console

    app.add_middleware(views.RouteGuardMiddleware, exempt_paths=("/health",))
    app.include_router(views.router, tags=["Console"])

    @app.get("/health")
    def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "environment": console.settings.ENVIRONMENT,
            "session": console.session.state.value,
        }

    return app


def get_app() -> FastAPI:
    """Application factory used by the runner"""
    init_application_logging()
    return create_app()
