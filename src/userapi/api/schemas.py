"""User-related pydantic schemas (DTOs) used by the API layer.

Wire format is camelCase (``firstName``); Python attributes stay
snake_case. Models accept either spelling on input.
"""

import uuid
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

__all__ = [
    "UserDto",
    "UserCreateDto",
    "UserUpdateDto",
    "LOGIN_FORMAT_MESSAGE",
    "is_valid_login",
    "validation_errors",
]


LOGIN_FORMAT_MESSAGE = "Login should contain only letters or digits"


def is_valid_login(login: str) -> bool:
    """ASCII letters and digits only, at least one character."""
    return login.isascii() and login.isalnum()


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class UserDto(_ApiModel):
    """Publicly exposed user (GET responses, PUT-created body)."""

    id: uuid.UUID
    login: str
    first_name: str = ""
    last_name: str = ""


class UserCreateDto(_ApiModel):
    """Payload of POST /api/users."""

    login: str = Field(..., min_length=1)
    first_name: str = ""
    last_name: str = ""

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def null_name_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("login")
    @classmethod
    def login_is_alphanumeric(cls, value: str) -> str:
        if not is_valid_login(value):
            raise PydanticCustomError("login_format", LOGIN_FORMAT_MESSAGE)
        return value


class UserUpdateDto(_ApiModel):
    """
    Payload of PUT /api/users/:userId, and the document a PATCH is
    applied to. Every field is required and non-empty, but the login
    format is not checked here: only creation enforces it.
    """

    login: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)


def validation_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """
    Flatten a pydantic ValidationError into the 422 error map.

        {"login": ["Field required"], "firstName": ["String should have ..."]}

    Keys are the field names as the client spelled them (camelCase).
    """
    errors: Dict[str, List[str]] = {}
    for error in exc.errors(include_url=False):
        key = ".".join(str(part) for part in error["loc"]) or "body"
        errors.setdefault(key, []).append(error["msg"])
    return errors
