"""
Application factory: builds a ready-to-run server for the users API.

    server = create_app(ServerConfig(port=5000))
    server.run()

The repository is created here and handed to the controller explicitly,
so tests can pass in a pre-filled one and every app gets its own store.
"""

import logging
from typing import Optional

from .api import UsersController
from .config import ServerConfig
from .domain import InMemoryUserRepository, UserRepository
from .middleware import LoggingMiddleware
from .server import HTTPServer


logger = logging.getLogger(__name__)


def create_app(
    config: Optional[ServerConfig] = None,
    repository: Optional[UserRepository] = None,
) -> HTTPServer:
    """
    Args:
        config: Server configuration. Defaults to ServerConfig().
        repository: User store. A fresh in-memory one when omitted.

    Returns:
        An HTTPServer with the users routes and the access log installed.
        Call run() to serve, or dispatch() to handle requests in-process.
    """
    config = config or ServerConfig()
    server = HTTPServer(config)

    server.use(LoggingMiddleware(log_format=config.log_format))

    controller = UsersController(
        repository if repository is not None else InMemoryUserRepository(),
        server.router,
        default_page_size=config.default_page_size,
        max_page_size=config.max_page_size,
    )
    controller.register()

    logger.debug(f"Registered {len(server.router.routes())} routes")
    return server
