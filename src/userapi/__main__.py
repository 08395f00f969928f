"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    python -m userapi                      # 127.0.0.1:5000
    python -m userapi --port 8000
    python -m userapi --host 0.0.0.0       # containers
    python -m userapi --log-format json    # for log aggregators

Environment variables (USERAPI_*) set the defaults; flags override them.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .app import create_app
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userapi",
        description="REST API for user resources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  userapi                          # Run with defaults
  userapi --port 8000              # Custom port
  userapi --host 0.0.0.0           # Listen on all interfaces
  userapi --log-level DEBUG        # Verbose logging
        """
    )

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Number of worker threads (default: {defaults.max_workers})"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})"
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"userapi {__version__}"
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> ServerConfig:
    """Environment first, then command-line flags on top."""
    config = ServerConfig.from_env()
    args = build_parser(config).parse_args(argv)

    config.host = args.host
    config.port = args.port
    config.max_workers = args.workers
    config.log_level = args.log_level
    config.log_format = args.log_format
    return config


def main(argv: Optional[List[str]] = None):
    try:
        server = create_app(parse_config(argv))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
