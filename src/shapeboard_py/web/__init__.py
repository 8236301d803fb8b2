"""Web layer for shapeboard-py API."""

from shapeboard_py.web.controllers import BoardController
from shapeboard_py.web.health import HealthController
from shapeboard_py.web.router import create_router

__all__ = ["BoardController", "HealthController", "create_router"]
