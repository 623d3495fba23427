"""Main FastAPI application for the PlantUML rendering API."""

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .. import __version__
from ..core.layout_locator import LayoutToolLocator, LayoutToolSettings
from ..core.renderer import PlantUMLRenderer
from ..core.self_test import SelfTestRunner
from ..utils.logging_config import configure_logging
from .models.config import APIConfig
from .models.responses import ErrorResponse
from .routes import health, render
from .services.rendering import RenderingService


logger = logging.getLogger(__name__)


def build_rendering_service(config: APIConfig) -> RenderingService:
    """Locate Graphviz and wire the renderer and service around it."""
    settings = LayoutToolSettings()
    LayoutToolLocator(settings).locate(config.graphviz_path)

    renderer = PlantUMLRenderer(
        settings,
        jar_path=config.plantuml_jar,
        java_executable=config.java_executable,
    )
    return RenderingService(renderer, settings, pool_size=config.worker_pool_size)


def _cors_kwargs(origins: list) -> dict:
    """Translate origin patterns such as ``http://localhost:*`` into a regex."""
    patterns = [o.strip() for o in origins if o.strip()]
    if "*" in patterns or not any("*" in o for o in patterns):
        return {"allow_origins": patterns}
    regex = "|".join(re.escape(o).replace(r"\*", r"[^/]*") for o in patterns)
    return {"allow_origin_regex": f"^(?:{regex})$"}


def create_app(config: Optional[APIConfig] = None) -> FastAPI:
    """Create the FastAPI application."""
    config = config or APIConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        # Startup
        configure_logging(config.log_level)
        logger.info("Starting PlantUML Server v%s", app.version)
        logger.info("Configuration: %s", config.model_dump())

        service = build_rendering_service(config)
        logger.info("PlantUML Service initialized")
        logger.info("PlantUML Version: %s", service.plantuml_version())

        # Diagnostics only; a failing self-test does not stop startup
        report = await asyncio.to_thread(SelfTestRunner(service).run)
        logger.info("Self-test status: %s", report.status)

        app.state.rendering_service = service
        app.state.self_test_report = report

        yield

        # Shutdown
        service.shutdown(wait=True)
        logger.info("API shutdown complete")

    app = FastAPI(
        title="PlantUML Server",
        description="HTTP API for rendering PlantUML diagrams to SVG and PNG",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=["*"],
        max_age=3600,
        **_cors_kwargs(config.cors_origins),
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with structured error responses."""

        # If detail is already a dict (from our dependencies), use it directly
        if isinstance(exc.detail, dict):
            error_detail = exc.detail
        else:
            error_detail = {
                "code": "HTTP_ERROR",
                "message": str(exc.detail),
                "details": None
            }

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=error_detail,
                timestamp=datetime.now()
            ).model_dump(mode="json")
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Reject malformed or blank requests before they reach the service."""
        messages = [str(err.get("msg", "")) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error={
                    "code": "INVALID_REQUEST",
                    "message": "PlantUML text is required",
                    "details": "; ".join(m for m in messages if m) or None
                },
                timestamp=datetime.now()
            ).model_dump(mode="json")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unexpected error: %s", exc)

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error={
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": str(exc)
                },
                timestamp=datetime.now()
            ).model_dump(mode="json")
        )

    app.include_router(render.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "PlantUML Server",
            "version": __version__,
            "description": "HTTP API for rendering PlantUML diagrams to SVG and PNG",
            "docs": "/docs",
            "health": "/api/plantuml/health"
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    config = APIConfig.from_env()
    uvicorn.run(
        "plantuml_server.api.main:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    run()
