"""Application entrypoint and FastAPI app factory for plugcfg.

Defines the `PlugcfgApplication` which:

- Configures logging
- Runs the configuration pass during app lifespan (`initialize_api()`)
- Registers the diagnostics routes from `plugcfg/api/routes.py`
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI

from . import __version__
from .api.routes import initialize_api, router
from .config.settings import Settings


class PlugcfgApplication:
    """Create and run the plugcfg diagnostics application.

    Responsibilities:
    - Provide lifecycle hooks to run plugin configuration
    - Include API routes
    - Expose `create_app()` and `run()` helpers
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.app: FastAPI | None = None
        self._setup_logging(self.settings.log_level)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _setup_logging(level: str) -> None:
        """Configure application logging."""
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    def _create_lifespan_manager(self):
        """Create an async lifespan manager that configures plugins on startup."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self.logger.info(f"Configuring plugins from {self.settings.config_file}")
            orchestrator = initialize_api(self.settings)
            if orchestrator.errors_found():
                self.logger.warning("Plugin configuration finished with issues")
            else:
                self.logger.info("Plugin configuration finished")
            yield
            self.logger.info("Shutting down plugcfg...")

        return lifespan

    def _register_routes(self) -> None:
        """Register application routes including the root info route."""
        self.app.include_router(router)

        @self.app.get("/")
        async def root() -> Dict[str, Any]:
            """Root endpoint providing system information."""
            return {
                "message": self.settings.app_name,
                "version": __version__,
                "status": "running",
            }

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application instance."""
        self.app = FastAPI(
            title="plugcfg",
            description="Convention-based plugin configuration loader",
            version=__version__,
            lifespan=self._create_lifespan_manager(),
        )

        self._register_routes()

        return self.app

    def run(self) -> None:
        """Run the application server with Uvicorn."""
        if not self.app:
            self.create_app()

        if self.app is None:
            raise RuntimeError("Failed to create FastAPI application")

        uvicorn.run(
            self.app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level="info" if not self.settings.debug else "debug",
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an application without starting a server."""
    return PlugcfgApplication(settings).create_app()


def main() -> None:
    """Main entry point for the application."""
    PlugcfgApplication().run()


if __name__ == "__main__":
    main()
