"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, worker threads, request parser,
middleware pipeline and router.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts a TCP connection
    2. The connection is submitted to the worker pool
    3. Worker reads request bytes (Connection.read_request)
    4. RequestParser turns them into an HTTPRequest    (400/405/413/505)
    5. dispatch(): middleware → router → handler        (404/405/500)
    6. Response serialized (body dropped for HEAD) and sent
    7. Keep-alive: back to 3, otherwise close

dispatch() is also the in-process entry point the unit tests use: it
runs steps 5 and nothing else, no sockets involved.

=============================================================================
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
    error_response, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server.

        server = HTTPServer(ServerConfig(port=5000))

        @server.get("/api/ping")
        def ping(request):
            return ok({"pong": True})

        server.use(LoggingMiddleware())
        server.run()
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Validated here, so a bad value
                    fails before anything binds.
            router: Router to dispatch to. A fresh one when omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = router or Router()
        self._middleware = MiddlewarePipeline()
        self._handler = None
        self._handler_lock = threading.Lock()
        self._running = False

    # =========================================================================
    # APPLICATION SETUP
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware. First added runs outermost."""
        self._middleware.add(middleware)
        with self._handler_lock:
            self._handler = None  # rebuilt on next dispatch
        return self

    @property
    def router(self) -> Router:
        return self._router

    def get(self, path: str, **kwargs):
        return self._router.get(path, **kwargs)

    def post(self, path: str, **kwargs):
        return self._router.post(path, **kwargs)

    def put(self, path: str, **kwargs):
        return self._router.put(path, **kwargs)

    def patch(self, path: str, **kwargs):
        return self._router.patch(path, **kwargs)

    def delete(self, path: str, **kwargs):
        return self._router.delete(path, **kwargs)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once a port-0 server started."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run one request through middleware and router.

        Never raises: a parse error raised by a handler (bad JSON body)
        becomes its status code, anything else is logged with its
        traceback and answered with a bare 500.
        """
        with self._handler_lock:
            if self._handler is None:
                self._handler = self._middleware.wrap(self._router.handle)
            handler = self._handler

        try:
            return handler(request)
        except HTTPParseError as e:
            logger.info(f"Rejected {request.method} {request.path}: {e}")
            return error_response(HTTPStatus(e.status_code), str(e))
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method} {request.path}: {e}")
            return internal_error()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Serve until shutdown() or SIGINT/SIGTERM. Blocks.

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="userapi-worker",
        )
        self._running = True

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.max_workers} workers)"
        )
        for route in self._router.routes():
            logger.debug(f"  {route.method or 'ANY':7} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_started(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_started(timeout)

    def shutdown(self):
        """Ask a running server to stop. Callable from any thread."""
        self._running = False
        self._socket_server.shutdown()

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        if self._executor:
            self._executor.shutdown(wait=True)
            self._executor = None
        logger.info("Server stopped")

    def _setup_logging(self):
        """
        Configure the root logger once. basicConfig() is a no-op when the
        host application already configured logging.
        """
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger("userapi").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand an accepted connection to a worker thread."""
        try:
            self._executor.submit(self._process_connection, conn)
        except RuntimeError:
            # executor already shut down
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Keep-alive loop for one connection (runs in a worker thread).
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break
                except ValueError as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break
                except OSError as e:
                    logger.debug(f"[{conn.id}] Read failed: {e}")
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address, self.address)
                except HTTPParseError as e:
                    self._send_error(conn, HTTPStatus(e.status_code), str(e))
                    break

                response = self.dispatch(request)

                keep_alive = request.is_keep_alive and self.config.keep_alive
                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                data = response.to_bytes(
                    self.config.server_name,
                    include_body=request.method != "HEAD",
                )
                if not conn.send_response(data) or not keep_alive:
                    break

                conn.set_keep_alive()

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        """Error sent before a request reached dispatch(); always closes."""
        response = error_response(status, message)
        response.headers["Connection"] = "close"
        conn.send_response(response.to_bytes(self.config.server_name))
