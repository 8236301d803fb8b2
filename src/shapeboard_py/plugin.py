"""Litestar plugin for shapeboard-py integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from shapeboard_py.core.history import DEFAULT_MAX_HISTORY
from shapeboard_py.core.types import Modifier
from shapeboard_py.realtime.manager import ConnectionManager
from shapeboard_py.services.board import BoardService
from shapeboard_py.storage.memory import InMemoryStateStorage
from shapeboard_py.web.router import create_router

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from shapeboard_py.storage.base import StateStorageProtocol


@dataclass
class ShapeboardConfig:
    """Configuration for the Shapeboard plugin.

    Attributes:
        storage: Storage backend for board state. If None,
            InMemoryStateStorage will be used by default.
        enable_api: Whether to mount the REST API routes. Defaults to True.
        enable_websocket: Whether to mount the WebSocket editing endpoint.
            Defaults to True.
        api_path: Base path for mounting API routes. Defaults to "/api".
        ws_path: Base path for WebSocket routes. Defaults to "/ws".
        max_history: Maximum undo steps per editing session, or None for no
            limit. Defaults to 100.
        pan_modifier: Modifier that turns a left-button drag into a pan.
            Defaults to Ctrl.
        dependency_key: Dependency injection key for BoardService.
            Defaults to "service".
        connection_manager: Optional pre-configured ConnectionManager. If
            None, a new one will be created.

    Example:
        >>> from shapeboard_py.storage import FileStateStorage
        >>> config = ShapeboardConfig(storage=FileStateStorage("./boards"), api_path="/api/v1")
    """

    storage: StateStorageProtocol | None = None
    enable_api: bool = True
    enable_websocket: bool = True
    api_path: str = "/api"
    ws_path: str = "/ws"
    max_history: int | None = DEFAULT_MAX_HISTORY
    pan_modifier: Modifier = Modifier.CTRL
    dependency_key: str = "service"
    connection_manager: ConnectionManager | None = field(default=None)


class ShapeboardPlugin(InitPluginProtocol):
    """Litestar plugin for shapeboard-py integration.

    Sets up the storage backend, the BoardService and the ConnectionManager,
    registers them for dependency injection, and mounts the REST API and the
    WebSocket editing endpoint.

    Example:
        >>> from litestar import Litestar
        >>> from shapeboard_py import ShapeboardPlugin, ShapeboardConfig
        >>>
        >>> app = Litestar(plugins=[ShapeboardPlugin(ShapeboardConfig())])

    Attributes:
        _config: The plugin configuration.
        _storage: The initialized storage backend (None until on_app_init).
        _service: The initialized BoardService (None until on_app_init).
        _connection_manager: The WebSocket connection manager (None until on_app_init).
    """

    def __init__(self, config: ShapeboardConfig | None = None) -> None:
        """Initialize the plugin with optional configuration.

        Args:
            config: Plugin configuration. If None, ShapeboardConfig with default
                values will be used.
        """
        self._config = config or ShapeboardConfig()
        self._storage: StateStorageProtocol | None = None
        self._service: BoardService | None = None
        self._connection_manager: ConnectionManager | None = None

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin during application startup.

        Args:
            app_config: The Litestar application configuration object.

        Returns:
            The modified application configuration.
        """
        self._storage = self._config.storage or InMemoryStateStorage()
        self._service = BoardService(
            self._storage,
            max_history=self._config.max_history,
            pan_modifier=self._config.pan_modifier,
        )
        self._connection_manager = self._config.connection_manager or ConnectionManager()

        def provide_service() -> BoardService:
            """Dependency provider for BoardService."""
            return self.service

        def provide_connection_manager() -> ConnectionManager:
            """Dependency provider for ConnectionManager."""
            return self.connection_manager

        app_config.dependencies[self._config.dependency_key] = Provide(provide_service, sync_to_thread=False)
        app_config.dependencies["connection_manager"] = Provide(provide_connection_manager, sync_to_thread=False)

        if self._config.enable_api:
            app_config.route_handlers.append(create_router(path=self._config.api_path))

        if self._config.enable_websocket:
            from shapeboard_py.realtime.handler import create_websocket_handler

            app_config.route_handlers.append(
                create_websocket_handler(
                    path=self._config.ws_path,
                    connection_manager=self._connection_manager,
                    board_service=self._service,
                )
            )

        return app_config

    @property
    def storage(self) -> StateStorageProtocol:
        """Get the initialized storage backend.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._storage is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._storage

    @property
    def service(self) -> BoardService:
        """Get the initialized board service.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._service is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._service

    @property
    def connection_manager(self) -> ConnectionManager:
        """Get the initialized connection manager.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._connection_manager is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._connection_manager
