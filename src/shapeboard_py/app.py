"""Main Litestar application for shapeboard-py.

This module provides the application factory and the configured app instance
for running shapeboard-py as a standalone application.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from litestar import Litestar
from litestar.openapi import OpenAPIConfig

from shapeboard_py import __version__
from shapeboard_py.cli import ShapeboardCLIPlugin
from shapeboard_py.core.error_handling import get_exception_handlers
from shapeboard_py.core.logging import CorrelationIdMiddleware, configure_logging
from shapeboard_py.plugin import ShapeboardConfig, ShapeboardPlugin
from shapeboard_py.storage.file import FileStateStorage
from shapeboard_py.storage.memory import InMemoryStateStorage
from shapeboard_py.web.health import HealthController

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from shapeboard_py.storage.base import StateStorageProtocol

logger = structlog.get_logger(__name__)

STATE_DIR_ENV = "SHAPEBOARD_STATE_DIR"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("true", "1", "yes")


def _database_lifespan(url: str) -> tuple[StateStorageProtocol, Callable]:
    """Create database storage and a lifespan that creates tables and disposes the engine."""
    from shapeboard_py.storage.db import DatabaseStateStorage, create_database_engine, create_tables

    engine = create_database_engine(url)

    @asynccontextmanager
    async def lifespan(_app: Litestar) -> AsyncGenerator[None, None]:
        await create_tables(engine)
        logger.info("Database initialized", url=engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            await engine.dispose()

    return DatabaseStateStorage.from_engine(engine), lifespan


def create_storage_from_env() -> tuple[StateStorageProtocol, list[Callable]]:
    """Pick the storage backend from the environment.

    ``SHAPEBOARD_DATABASE_URL`` selects database storage (requires the ``db``
    extra), ``SHAPEBOARD_STATE_DIR`` selects file storage, and in-memory
    storage is used otherwise.

    Returns:
        The storage backend and the lifespan handlers it needs.
    """
    database_url = os.environ.get("SHAPEBOARD_DATABASE_URL")
    if database_url:
        try:
            from shapeboard_py.storage.db import get_database_url

            storage, lifespan = _database_lifespan(get_database_url() or database_url)
        except ImportError:
            logger.warning("Database extras not installed, falling back to file or memory storage")
        else:
            return storage, [lifespan]

    state_dir = os.environ.get(STATE_DIR_ENV)
    if state_dir:
        return FileStateStorage(state_dir), []
    return InMemoryStateStorage(), []


def create_app(
    *,
    storage: StateStorageProtocol | None = None,
    enable_api: bool = True,
    enable_websocket: bool = True,
    debug: bool = False,
    json_logs: bool = False,
) -> Litestar:
    """Create and configure the Litestar application.

    Args:
        storage: Storage backend. If None, it is chosen from the environment.
        enable_api: Whether to enable the REST API routes.
        enable_websocket: Whether to enable the WebSocket editing endpoint.
        debug: Whether to enable debug mode.
        json_logs: Whether to output logs as JSON (for production).

    Returns:
        Configured Litestar application instance.
    """
    configure_logging(debug=debug, json_logs=json_logs)

    lifespan: list[Callable] = []
    if storage is None:
        storage, lifespan = create_storage_from_env()
    logger.info("Using storage backend", backend=type(storage).__name__)

    plugins: list = [
        ShapeboardCLIPlugin(),
        ShapeboardPlugin(
            ShapeboardConfig(
                storage=storage,
                enable_api=enable_api,
                enable_websocket=enable_websocket,
                api_path="/api",
                ws_path="/ws",
                dependency_key="service",
            )
        ),
    ]

    return Litestar(
        route_handlers=[HealthController],
        plugins=plugins,
        debug=debug,
        lifespan=lifespan,
        middleware=[CorrelationIdMiddleware],
        exception_handlers=get_exception_handlers(),
        openapi_config=OpenAPIConfig(
            title="shapeboard-py API",
            version=__version__,
            description="Shape editor sessions with undo/redo and cross-tab sync",
            path="/schema",
            use_handler_docstrings=True,
        ),
    )


# Default application instance for uvicorn
# Use SHAPEBOARD_DEBUG=true for dev mode, SHAPEBOARD_JSON_LOGS=true for JSON logs
app = create_app(debug=_env_flag("SHAPEBOARD_DEBUG"), json_logs=_env_flag("SHAPEBOARD_JSON_LOGS"))
