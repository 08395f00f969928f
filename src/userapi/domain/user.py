"""
The user entity: the canonical record the repository stores.
"""

from dataclasses import dataclass, replace
from typing import Optional
import uuid


NIL_UUID = uuid.UUID(int=0)


@dataclass
class UserEntity:
    """
    A stored user.

    Attributes:
        id: Assigned by the repository on insert (or supplied by the client
            through PUT). Never changes afterwards.
        login: Letters and digits only when created through POST.
        first_name: Optional, empty by default.
        last_name: Optional, empty by default.
    """

    login: str
    first_name: str = ""
    last_name: str = ""
    id: Optional[uuid.UUID] = None

    @property
    def has_id(self) -> bool:
        return self.id is not None and self.id != NIL_UUID

    def copy(self) -> "UserEntity":
        return replace(self)

    def assign(self, login: str, first_name: str, last_name: str) -> None:
        """Overwrite the mutable fields. The id is left alone."""
        self.login = login
        self.first_name = first_name
        self.last_name = last_name


def parse_user_id(value: Optional[str]) -> Optional[uuid.UUID]:
    """
    Parse a user id from a path segment. None when it is not a UUID.

        parse_user_id("9f1c0a5e-...")  → UUID('9f1c0a5e-...')
        parse_user_id("42")            → None
    """
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None
