"""
The users REST API: DTO schemas, entity mapping, JSON Patch and the
controller that ties them to the router.
"""

from .users import UsersController, BASE_PATH
from .patch import PatchDocument, PatchOperation, PatchError
from .schemas import UserDto, UserCreateDto, UserUpdateDto, validation_errors

__all__ = [
    "UsersController",
    "BASE_PATH",
    "PatchDocument",
    "PatchOperation",
    "PatchError",
    "UserDto",
    "UserCreateDto",
    "UserUpdateDto",
    "validation_errors",
]
