"""
FastAPI application for the call-sheet extraction agent.

Usage:
    # Development server with auto-reload
    uvicorn callsheet_agent.api.main:app --reload --host 0.0.0.0 --port 8000

    # Production server
    uvicorn callsheet_agent.api.main:app --host 0.0.0.0 --port 8000 --workers 4

    # Debug mode (verbose logging)
    LOG_LEVEL=DEBUG uvicorn callsheet_agent.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import config
from ..tools import default_registry
from ..tracing import init_tracing_client, shutdown_tracing
from .routes import extract, health


def configure_logging():
    """Configure logging based on LOG_LEVEL environment variable."""
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("callsheet_agent").setLevel(log_level)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting call-sheet agent API server")

    logger.info("=" * 60)
    logger.info("PROVIDER CONFIGURATION")
    logger.info(f"  Base URL: {config.provider.base_url}")
    logger.info(f"  Model: {config.provider.model}")
    logger.info(f"  API key: {'configured' if config.provider.api_key else 'per-request only'}")
    logger.info(f"  Timeout: {config.provider.timeout}s")

    logger.info("-" * 60)
    logger.info("AGENT")
    logger.info(f"  Max turns: {config.agent.max_turns}")
    logger.info(f"  Schema: {config.agent.schema_file or config.agent.schema}")

    logger.info("-" * 60)
    logger.info("REGISTERED TOOLS")
    for name, tool in default_registry.all_tools().items():
        logger.info(f"  - {name}: {tool.description[:60]}...")
    logger.info(f"  Geocoding: {'ENABLED' if config.tools.google_maps_api_key else 'NO API KEY'}")
    logger.info(f"  Tool timeout: {config.tools.timeout}s (parallel={config.tools.parallel})")

    logger.info("-" * 60)
    logger.info("LANGFUSE OBSERVABILITY")
    tracing_client = init_tracing_client(
        public_key=config.langfuse.public_key,
        secret_key=config.langfuse.secret_key,
        host=config.langfuse.host,
        debug=config.langfuse.debug,
    )
    if tracing_client.enabled:
        logger.info("  Status: ENABLED")
        logger.info(f"  Host: {config.langfuse.host or 'https://cloud.langfuse.com'}")
    else:
        logger.info("  Status: DISABLED")
        if tracing_client.error:
            logger.info(f"  Reason: {tracing_client.error}")

    logger.info("=" * 60)

    yield

    logger.info("Shutting down call-sheet agent API server")
    shutdown_tracing()
    logger.info("Tracing client shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Call-Sheet Agent API",
        description=(
            "Extracts structured logistics (date, project, locations) from "
            "film and TV call sheets with a tool-calling LLM agent."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware - allow all origins for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(extract.router, tags=["Extraction"])

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Log validation errors before returning 400 response."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {jsonable_errors(exc)}"
        )
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_errors(exc)},
        )

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw input, which may hold an API key."""
    return [
        {key: value for key, value in err.items() if key not in ("input", "ctx", "url")}
        for err in exc.errors()
    ]


app = create_app()


def run_server():
    """
    Run the server using uvicorn.

    This is the entry point for running the server programmatically.
    """
    import uvicorn

    uvicorn.run(
        "callsheet_agent.api.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        workers=1 if config.server.reload else config.server.workers,
    )


if __name__ == "__main__":
    run_server()
