"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request monitoring), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from truthshield import __version__
from truthshield.core.database import init_db
from truthshield.core.logging_config import get_logger, setup_logging
from truthshield.core.monitoring import initialize_logfire

from .api.v1 import auth, enterprise, family, games, health, threats
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the database tables on startup. A failing database is logged and
    the server still starts so that the health endpoint stays reachable.
    """
    # Startup
    try:
        logger.info("Starting up TruthShield Pro API...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down TruthShield Pro API...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    TruthShield Pro API

    Backend for the TruthShield online-safety platform: accounts, security
    training games, threat reporting and content analysis, family groups and
    enterprise dashboards.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

app.add_middleware(LogfireMiddleware)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, prefix=constant.API_V1_STR, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth")
app.include_router(games.router, prefix=f"{constant.API_V1_STR}/games")
app.include_router(threats.router, prefix=f"{constant.API_V1_STR}/threats")
app.include_router(family.router, prefix=f"{constant.API_V1_STR}/family")
app.include_router(enterprise.router, prefix=f"{constant.API_V1_STR}/enterprise")


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_level=settings.log_level.lower())
