"""
Conversions between entities and DTOs.
"""

from .schemas import UserCreateDto, UserDto, UserUpdateDto
from ..domain.user import UserEntity


def to_dto(user: UserEntity) -> UserDto:
    return UserDto(
        id=user.id,
        login=user.login,
        first_name=user.first_name,
        last_name=user.last_name,
    )


def to_update_document(user: UserEntity) -> dict:
    """
    The entity in UserUpdateDto shape as a plain camelCase dict, the
    document a patch is applied to. Not validated: a stored user may
    legitimately have empty names until someone patches them.
    """
    return {
        "login": user.login,
        "firstName": user.first_name,
        "lastName": user.last_name,
    }


def entity_from_create(dto: UserCreateDto) -> UserEntity:
    return UserEntity(login=dto.login, first_name=dto.first_name, last_name=dto.last_name)


def apply_update(user: UserEntity, dto: UserUpdateDto) -> UserEntity:
    """Copy all three fields from the DTO, overwriting unconditionally."""
    user.assign(dto.login, dto.first_name, dto.last_name)
    return user
