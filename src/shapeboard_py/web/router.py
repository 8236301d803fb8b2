"""Router configuration for the shapeboard-py API."""

from __future__ import annotations

from litestar import Router

from shapeboard_py.web.controllers import BoardController


def create_router(path: str = "/api") -> Router:
    """Create the shapeboard-py API router.

    Args:
        path: The base path for all API routes. Defaults to "/api".

    Returns:
        A configured Litestar Router instance.

    Example:
        >>> router = create_router("/api/v1")
    """
    return Router(path=path, route_handlers=[BoardController])
