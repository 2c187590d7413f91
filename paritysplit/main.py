"""FastAPI application entry point."""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from paritysplit.api import router
from paritysplit.config import settings
from paritysplit.storage import OutputJanitor, ensure_directories


def configure_logging() -> None:
    """Configure structured logging with structlog."""
    # Set up standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(
            ) if settings.log_level == "DEBUG" else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger = structlog.get_logger()

    # Startup
    logger.info(
        "Starting parity splitter service",
        service=settings.service_name,
        port=settings.port,
    )

    upload_dir = Path(settings.upload_dir)
    public_dir = Path(settings.public_dir)
    ensure_directories(upload_dir, public_dir)

    janitor = OutputJanitor(
        [public_dir, upload_dir],
        retention_seconds=settings.output_retention_seconds,
        interval_seconds=settings.sweep_interval_seconds,
    )
    sweeper = asyncio.create_task(janitor.run())

    yield

    # Shutdown
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    logger.info("Shutting down parity splitter service")


# Configure logging before creating app
configure_logging()

# Create FastAPI application
app = FastAPI(
    title="PDF Parity Splitter",
    description="Splits uploaded PDFs into odd-page and even-page documents",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.service_name}


# Split outputs, created by the lifespan handler
app.mount(
    settings.public_url_path,
    StaticFiles(directory=settings.public_dir, check_dir=False),
    name="public",
)


def run() -> None:
    """Run the service with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
