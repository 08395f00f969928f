"""
=============================================================================
USERS RESOURCE
=============================================================================

    GET     /api/users/:userId    200 UserDto (JSON or XML)   404
    HEAD    /api/users/:userId    200, no body                 404
    POST    /api/users            201 + Location, body = id    400, 422
    PUT     /api/users/:userId    201 created / 204 replaced   400, 422
    PATCH   /api/users/:userId    204                          400, 404, 422
    DELETE  /api/users/:userId    204                          404
    GET     /api/users            200 + X-Pagination
    OPTIONS /api/users            200 + Allow

=============================================================================
STATUS CODE RULES
=============================================================================

    400  no body, a body that is not JSON or not the expected shape,
         a userId that is not a UUID, or PUT to the nil id
    404  the id is not stored (GET, HEAD, PATCH, DELETE)
    422  the body decoded but failed validation; the response carries
         {"errors": {"<field>": ["<message>", ...]}}

Every check runs before the repository is written, so a rejected request
never changes stored state.

The login format (letters and digits) is only checked on POST. PUT and
PATCH accept any non-empty login.

=============================================================================
"""

from typing import Any, Optional
import json
import logging
import uuid

from pydantic import ValidationError

from ..domain import UserEntity, UserRepository, NIL_UUID, parse_user_id
from ..http import (
    HTTPRequest, HTTPResponse, HTTPParseError, HTTPStatus, Router, ResponseBuilder,
    ok, created, no_content, bad_request, not_found, unprocessable_entity,
)
from ..http.media_types import XML, negotiate
from .mapping import apply_update, entity_from_create, to_dto, to_update_document
from .patch import PatchDocument, PatchError
from .schemas import UserCreateDto, UserUpdateDto, validation_errors


logger = logging.getLogger(__name__)

BASE_PATH = "/api/users"
ITEM_PATH = BASE_PATH + "/:userId"

COLLECTION_METHODS = ("GET", "POST", "OPTIONS")

INVALID_ID_MESSAGE = "The user id must be a UUID"


class UsersController:
    """
    Handlers for the users resource.

        repository = InMemoryUserRepository()
        router = Router()
        UsersController(repository, router).register()
    """

    def __init__(
        self,
        repository: UserRepository,
        router: Router,
        default_page_size: int = 10,
        max_page_size: int = 20,
    ):
        self.repository = repository
        self.router = router
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def register(self) -> "UsersController":
        """Add every users route to the router."""
        self.router.add_route(ITEM_PATH, self.get_user_by_id, "GET", name="get_user_by_id")
        self.router.add_route(ITEM_PATH, self.get_user_by_id, "HEAD", name="get_user_by_id")
        self.router.add_route(ITEM_PATH, self.update_user, "PUT")
        self.router.add_route(ITEM_PATH, self.partially_update_user, "PATCH")
        self.router.add_route(ITEM_PATH, self.delete_user, "DELETE")
        self.router.add_route(BASE_PATH, self.get_users, "GET", name="get_users")
        self.router.add_route(BASE_PATH, self.create_user, "POST")
        self.router.add_route(BASE_PATH, self.options_users, "OPTIONS")
        return self

    # =========================================================================
    # SINGLE USER
    # =========================================================================

    def get_user_by_id(self, request: HTTPRequest) -> HTTPResponse:
        """
        GET and HEAD. GET negotiates JSON or XML from Accept. HEAD answers
        with no body and echoes the Accept header as the content type.
        """
        user_id = self._user_id(request)
        if user_id is None:
            return bad_request(INVALID_ID_MESSAGE)

        user = self.repository.find_by_id(user_id)
        if user is None:
            return not_found("User not found")

        if request.method == "HEAD":
            return (ResponseBuilder()
                .status(HTTPStatus.OK)
                .content_type(f"{request.accept or 'application/json'}; charset=utf-8")
                .build())

        dto = to_dto(user).to_wire()
        if negotiate(request.accept) == XML:
            return ResponseBuilder().status(HTTPStatus.OK).xml("UserDto", dto).build()
        return ok(dto)

    def create_user(self, request: HTTPRequest) -> HTTPResponse:
        body = self._read_object(request)
        if body is None:
            return bad_request("A JSON object body is required")

        try:
            dto = UserCreateDto.model_validate(body)
        except ValidationError as e:
            logger.debug(f"Rejected new user: {e.error_count()} validation error(s)")
            return unprocessable_entity(validation_errors(e))

        user = self.repository.insert(entity_from_create(dto))
        logger.info(f"Created user {user.id} ({user.login})")

        location = self.router.uri_for(request, "get_user_by_id", userId=user.id)
        return created(str(user.id), location=location)

    def update_user(self, request: HTTPRequest) -> HTTPResponse:
        """
        Full replace. An unknown id is created with exactly that id.
        """
        user_id = self._user_id(request)
        body = self._read_object(request)
        if user_id is None or user_id == NIL_UUID:
            return bad_request(INVALID_ID_MESSAGE)
        if body is None:
            return bad_request("A JSON object body is required")

        try:
            dto = UserUpdateDto.model_validate(body)
        except ValidationError as e:
            logger.debug(f"Rejected update of {user_id}: {e.error_count()} validation error(s)")
            return unprocessable_entity(validation_errors(e))

        user = self.repository.find_by_id(user_id) or UserEntity(login=dto.login, id=user_id)
        apply_update(user, dto)

        stored, inserted = self.repository.upsert_by_id(user_id, user)

        if inserted:
            logger.info(f"Created user {user_id} through PUT")
            return created(to_dto(stored).to_wire(), location="user")

        logger.info(f"Replaced user {user_id}")
        return no_content()

    def partially_update_user(self, request: HTTPRequest) -> HTTPResponse:
        """
        Apply a JSON Patch to the user's update document. Never creates.
        """
        try:
            data = request.json
        except HTTPParseError as e:
            logger.debug(f"Rejected patch: {e}")
            return bad_request(str(e))
        if data is None:
            return bad_request("A patch document is required")

        try:
            patch = PatchDocument.decode(data)
        except PatchError as e:
            return bad_request(str(e))

        user_id = self._user_id(request)
        if user_id is None:
            return bad_request(INVALID_ID_MESSAGE)

        user = self.repository.find_by_id(user_id)
        if user is None:
            return not_found("User not found")

        try:
            patched = patch.apply_to(to_update_document(user))
        except PatchError as e:
            logger.debug(f"Patch of {user_id} failed at {e.path!r}: {e}")
            return unprocessable_entity({e.path or "patch": [str(e)]})

        try:
            dto = UserUpdateDto.model_validate(patched)
        except ValidationError as e:
            logger.debug(f"Patched user {user_id} is invalid: {e.error_count()} error(s)")
            return unprocessable_entity(validation_errors(e))

        self.repository.update(apply_update(user, dto))
        logger.info(f"Patched user {user_id} ({len(patch)} operation(s))")
        return no_content()

    def delete_user(self, request: HTTPRequest) -> HTTPResponse:
        user_id = self._user_id(request)
        if user_id is None:
            return bad_request(INVALID_ID_MESSAGE)

        if self.repository.find_by_id(user_id) is None:
            return not_found("User not found")

        self.repository.delete(user_id)
        logger.info(f"Deleted user {user_id}")
        return no_content()

    # =========================================================================
    # COLLECTION
    # =========================================================================

    def get_users(self, request: HTTPRequest) -> HTTPResponse:
        """
        One page of users. Paging metadata and navigation links travel in
        the X-Pagination header so the body stays a plain list:

            X-Pagination: {"previousPageLink": null,
                           "nextPageLink": "http://host/api/users?pageNumber=2&pageSize=10",
                           "totalCount": 25, "pageSize": 10,
                           "currentPage": 1, "totalPages": 3}
        """
        page_number = max(1, request.get_query_int("pageNumber", 1))
        page_size = request.get_query_int("pageSize", self.default_page_size)
        page_size = min(max(1, page_size), self.max_page_size)

        page = self.repository.get_page(page_number, page_size)

        pagination = {
            "previousPageLink": self._page_link(request, page_number - 1, page_size)
                if page.has_previous else None,
            "nextPageLink": self._page_link(request, page_number + 1, page_size)
                if page.has_next else None,
            "totalCount": page.total_count,
            "pageSize": page.page_size,
            "currentPage": page.current_page,
            "totalPages": page.total_pages,
        }

        response = ok([to_dto(user).to_wire() for user in page])
        response.set_header("X-Pagination", json.dumps(pagination))
        return response

    def options_users(self, request: HTTPRequest) -> HTTPResponse:
        response = ok()
        response.set_header("Allow", ", ".join(COLLECTION_METHODS))
        return response

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _user_id(request: HTTPRequest) -> Optional[uuid.UUID]:
        return parse_user_id(request.path_params.get("userId"))

    @staticmethod
    def _read_object(request: HTTPRequest) -> Optional[Any]:
        """
        The JSON body if it is an object, otherwise None. A missing body,
        invalid JSON and a non-object body all end up as 400.
        """
        try:
            body = request.json
        except HTTPParseError as e:
            logger.debug(f"Unreadable body on {request.method} {request.path}: {e}")
            return None
        return body if isinstance(body, dict) else None

    def _page_link(self, request: HTTPRequest, page_number: int, page_size: int) -> Optional[str]:
        return self.router.uri_for(
            request,
            "get_users",
            query={"pageNumber": page_number, "pageSize": page_size},
        )
