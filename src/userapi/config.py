"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the users API in one dataclass.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    Priority (highest to lowest):

    1. Command-line arguments
       └── python -m userapi --port 8000

    2. Environment variables
       └── USERAPI_PORT=8000 python -m userapi

    3. Default values (in this dataclass)

Configuration is validated once at startup. A bad value stops the server
before it binds a socket.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the users API server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, timeout
    HTTP        keep_alive, keep_alive_timeout, max_request_size
    THREADING   max_workers
    PAGINATION  default_page_size, max_page_size
    LOGGING     log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 5000
    """Port to listen on. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes read per recv() call."""

    timeout: Optional[float] = 30.0
    """Socket timeout in seconds for the first request on a connection."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True

    keep_alive_timeout: float = 5.0
    """Idle seconds before a keep-alive connection is closed."""

    max_request_size: int = 1024 * 1024  # 1 MB

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    max_workers: int = 16
    """Worker threads serving connections concurrently."""

    # ─────────────────────────────────────────────────────────────────────
    # PAGINATION
    # ─────────────────────────────────────────────────────────────────────

    default_page_size: int = 10
    """Page size used when GET /api/users has no pageSize."""

    max_page_size: int = 20
    """Larger requested page sizes are clamped to this."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """'text' for humans, 'json' for log aggregators."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "userapi/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        USERAPI_HOST              Bind address (default: 127.0.0.1)
        USERAPI_PORT              Port (default: 5000)
        USERAPI_WORKERS           Worker threads (default: 16)
        USERAPI_TIMEOUT           Socket timeout in seconds (default: 30)
        USERAPI_PAGE_SIZE         Default page size (default: 10)
        USERAPI_MAX_PAGE_SIZE     Maximum page size (default: 20)
        USERAPI_LOG_LEVEL         Logging level (default: INFO)
        USERAPI_LOG_FORMAT        text or json (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("USERAPI_HOST", "127.0.0.1"),
            port=int(os.getenv("USERAPI_PORT", "5000")),
            max_workers=int(os.getenv("USERAPI_WORKERS", "16")),
            timeout=float(os.getenv("USERAPI_TIMEOUT", "30")),
            default_page_size=int(os.getenv("USERAPI_PAGE_SIZE", "10")),
            max_page_size=int(os.getenv("USERAPI_MAX_PAGE_SIZE", "20")),
            log_level=os.getenv("USERAPI_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("USERAPI_LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> None:
        """
        Check every value, raising ValueError on the first bad one.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.default_page_size < 1:
            raise ValueError("default_page_size must be >= 1")

        if self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must be >= default_page_size")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format}. Use text or json.")
