from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cli_bridge.core.process import ProcessStreamBridge
from cli_bridge.core.resolver import CommandResolver
from cli_bridge.models.config import AppConfig
from cli_bridge.utils.config import get_config
from cli_bridge.utils.logging import get_logger, setup_logging


logger = get_logger("app")


# Global state
_resolver: CommandResolver | None = None
_bridge: ProcessStreamBridge | None = None
_app_config: AppConfig | None = None


def get_resolver() -> CommandResolver:
    """Get command resolver instance."""
    if _resolver is None:
        raise RuntimeError("Command resolver not initialized")
    return _resolver


def get_bridge() -> ProcessStreamBridge:
    """Get process bridge instance."""
    if _bridge is None:
        raise RuntimeError("Process bridge not initialized")
    return _bridge


def get_app_config() -> AppConfig:
    """Get application config."""
    if _app_config is None:
        raise RuntimeError("App config not initialized")
    return _app_config


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _resolver, _bridge, _app_config

    # Startup
    _app_config = get_config()
    setup_logging(_app_config.logging.level)
    logger.info("Starting CLI bridge server...")

    _resolver = CommandResolver(_app_config.cli)
    command = _resolver.resolve()  # Resolve once up front
    logger.info(f"CLI command: {' '.join(command.argv([]))}")

    _bridge = ProcessStreamBridge(
        resolve=_resolver.resolve,
        cli=_app_config.cli,
        stream=_app_config.stream,
    )

    logger.info(f"Server configured on {_app_config.server.host}:{_app_config.server.port}")

    yield

    # Shutdown
    logger.info("Shutting down CLI bridge server...")
    _bridge = None
    _resolver = None
    logger.info("Server stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="CLI Bridge",
        description="Streams a command-line tool's output to HTTP clients as server-sent events",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Import and include routers
    from cli_bridge.api.routes import chat, command, health, search, settings

    config = get_config()

    if config.server.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.server.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Mount API routes
    app.include_router(chat.router, prefix=config.server.api_prefix)
    app.include_router(command.router, prefix=config.server.api_prefix)
    app.include_router(search.router, prefix=config.server.api_prefix)
    app.include_router(health.router, prefix=config.server.api_prefix)
    app.include_router(settings.router, prefix=config.server.api_prefix)

    return app
