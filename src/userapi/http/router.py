"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to handler functions and generates URLs back from
route names.

=============================================================================
ROUTES OF THE USERS API
=============================================================================

    GET     /api/users            → get_users         (name: "get_users")
    POST    /api/users            → create_user
    OPTIONS /api/users            → options_users
    GET     /api/users/:userId    → get_user_by_id    (name: "get_user_by_id")
    HEAD    /api/users/:userId    → get_user_by_id
    PUT     /api/users/:userId    → update_user
    PATCH   /api/users/:userId    → partially_update_user
    DELETE  /api/users/:userId    → delete_user

=============================================================================
PATTERN MATCHING
=============================================================================

Each pattern compiles to an anchored regex. A ":name" segment becomes a
named group that matches one path segment:

    /api/users/:userId   →   ^/api/users/(?P<userId>[^/]+)$

First registered, first matched. No match for the path at all → 404.
The path matches but not with this method → 405 with an Allow header.

=============================================================================
REVERSE ROUTING
=============================================================================

Handlers never hardcode their own URLs. Location headers and pagination
links come from the route name:

    router.url_for("get_user_by_id", userId="42")
        → "/api/users/42"

    router.url_for("get_users", query={"pageNumber": 2, "pageSize": 10})
        → "/api/users?pageNumber=2&pageSize=10"

    router.uri_for(request, "get_user_by_id", userId="42")
        → "http://localhost:5000/api/users/42"

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List, Mapping
from urllib.parse import quote, urlencode
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """A URL pattern bound to a handler for one method."""

    path: str
    method: Optional[str]            # None = any method
    handler: Handler
    name: Optional[str] = None

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """The route that matched plus the path parameters it captured."""
    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router with dynamic path parameters.

        router = Router()

        @router.get("/api/users/:userId", name="get_user_by_id")
        def get_user(request):
            return ok({"id": request.path_params["userId"]})
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._named_routes: Dict[str, Route] = {}

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (e.g. /api/users/:userId)
            handler: Callable taking an HTTPRequest, returning an HTTPResponse
            method: HTTP method, None for any
            name: Route name for url_for(). A name registered twice keeps
                  the first route, so GET and HEAD can share one name.
        """
        pattern, param_names = self._compile_pattern(path)
        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)

        if name and name not in self._named_routes:
            self._named_routes[name] = route

        logger.debug(f"Registered route {route.method or 'ANY'} {path}")
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile "/api/users/:userId" into ^/api/users/(?P<userId>[^/]+)$.

        Returns:
            (compiled regex, parameter names in order)
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue
            regex_parts.append("/")
            if segment.startswith(":"):
                name = segment[1:]
                param_names.append(name)
                regex_parts.append(f"(?P<{name}>[^/]+)")
            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")  # the root path "/"
        regex_parts.append("$")

        return re.compile("".join(regex_parts)), param_names

    # =========================================================================
    # MATCHING AND DISPATCH
    # =========================================================================

    @staticmethod
    def _normalize(path: str) -> str:
        """"/api/users/" → "/api/users". The root stays "/"."""
        return "/" + path.strip("/") if path != "/" else "/"

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """First route matching both method and path, or None."""
        path = self._normalize(path)
        method = method.upper()

        for route in self._routes:
            if route.method and route.method != method:
                continue
            found = route._pattern.match(path) if route._pattern else None
            if found:
                return RouteMatch(route=route, params=found.groupdict())

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for a path, for the 405 Allow header."""
        path = self._normalize(path)
        methods = set()

        for route in self._routes:
            if route._pattern and route._pattern.match(path):
                if route.method is None:
                    return ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]
                methods.add(route.method)

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request and call its handler.

        The matched path parameters are injected into request.path_params
        before the handler runs.
        """
        found = self.match(request.method, request.path)

        if found:
            request.path_params = found.params
            return found.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found(f"No route matches {request.path}")

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(). Returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "GET", name)

    def head(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "HEAD", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "POST", name)

    def put(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "PUT", name)

    def patch(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "PATCH", name)

    def delete(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "DELETE", name)

    def options(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "OPTIONS", name)

    # =========================================================================
    # URL GENERATION
    # =========================================================================

    def url_for(
        self,
        name: str,
        query: Optional[Mapping[str, Any]] = None,
        **params: Any,
    ) -> Optional[str]:
        """
        Build the path of a named route (reverse routing).

        Args:
            name: Route name given at registration.
            query: Optional query parameters, appended in the given order.
            **params: Values for the route's ":name" segments.

        Returns:
            The URL path, or None for an unknown route name.

        Raises:
            KeyError: If a path parameter is missing.
        """
        route = self._named_routes.get(name)
        if not route:
            return None

        segments = []
        for segment in route.path.split("/"):
            if segment.startswith(":"):
                segment = quote(str(params[segment[1:]]), safe="")
            segments.append(segment)

        url = "/".join(segments) or "/"
        if query:
            url += "?" + urlencode(query)
        return url

    def uri_for(
        self,
        request: HTTPRequest,
        name: str,
        query: Optional[Mapping[str, Any]] = None,
        **params: Any,
    ) -> Optional[str]:
        """Absolute form of url_for(), rooted at the request's base URL."""
        path = self.url_for(name, query, **params)
        if path is None:
            return None
        return request.base_url + path

    def routes(self) -> List[Route]:
        return list(self._routes)
