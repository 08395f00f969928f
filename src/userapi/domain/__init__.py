"""
Domain model: the user entity and its repository.
"""

from .user import UserEntity, NIL_UUID, parse_user_id
from .repository import UserRepository, InMemoryUserRepository, PageList

__all__ = [
    "UserEntity",
    "NIL_UUID",
    "parse_user_id",
    "UserRepository",
    "InMemoryUserRepository",
    "PageList",
]
