"""
=============================================================================
USERAPI
=============================================================================

A small REST API for user resources (CRUD, pagination, upsert, JSON Patch)
running on its own HTTP/1.1 server built on standard library sockets.

    userapi.http         request parsing, responses, routing, negotiation
    userapi.core         listening socket and client connections
    userapi.middleware   access logging
    userapi.domain       user entity and repository
    userapi.api          DTOs, JSON Patch, users controller
    userapi.app          create_app() wires it all together

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
