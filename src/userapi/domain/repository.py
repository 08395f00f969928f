"""
=============================================================================
USER REPOSITORY
=============================================================================

Stores users keyed by id. The controller only ever talks to the abstract
UserRepository, so a database-backed store can replace the in-memory one
without touching the HTTP code.

=============================================================================
PAGING
=============================================================================

Users are listed in insertion order. Page N of size S is the slice
[(N-1)*S, N*S):

    5 users, page size 2

    page 1: [u1, u2]    has_previous=False  has_next=True
    page 2: [u3, u4]    has_previous=True   has_next=True
    page 3: [u5]        has_previous=True   has_next=False

    total_pages = ceil(5 / 2) = 3

=============================================================================
THREAD SAFETY
=============================================================================

The server handles requests on a pool of worker threads that share one
repository. Every operation on the in-memory map holds a lock. Entities go
in and come out as copies, so a handler mutating the object it got back
does not change what is stored until it calls update() or upsert_by_id().

=============================================================================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import math
import threading
import uuid

from .user import UserEntity


logger = logging.getLogger(__name__)


@dataclass
class PageList:
    """One page of users plus what a client needs to navigate the rest."""

    items: List[UserEntity] = field(default_factory=list)
    total_count: int = 0
    current_page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


class UserRepository(ABC):
    """Storage contract used by the users controller."""

    @abstractmethod
    def find_by_id(self, user_id: uuid.UUID) -> Optional[UserEntity]:
        """The user with this id, or None."""

    @abstractmethod
    def insert(self, user: UserEntity) -> UserEntity:
        """Store a new user, assigning an id when it has none."""

    @abstractmethod
    def update(self, user: UserEntity) -> None:
        """Replace the stored record with the same id. No-op when absent."""

    @abstractmethod
    def upsert_by_id(self, user_id: uuid.UUID, user: UserEntity) -> Tuple[UserEntity, bool]:
        """Insert under user_id when absent, else replace. Returns (stored, inserted)."""

    @abstractmethod
    def delete(self, user_id: uuid.UUID) -> None:
        """Remove the user if present."""

    @abstractmethod
    def get_page(self, page_number: int, page_size: int) -> PageList:
        """Insertion-ordered page of users."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored users."""


class InMemoryUserRepository(UserRepository):
    """
    Dictionary-backed repository.

        repo = InMemoryUserRepository()
        alice = repo.insert(UserEntity(login="alice"))
        repo.find_by_id(alice.id)
    """

    def __init__(self, users: Optional[List[UserEntity]] = None):
        # dicts keep insertion order, which is the listing order
        self._users: Dict[uuid.UUID, UserEntity] = {}
        self._lock = threading.Lock()

        for user in users or []:
            self.insert(user)

    def find_by_id(self, user_id: uuid.UUID) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(user_id)
            return user.copy() if user else None

    def insert(self, user: UserEntity) -> UserEntity:
        stored = user.copy()
        with self._lock:
            if not stored.has_id:
                stored.id = uuid.uuid4()
            while stored.id in self._users:
                stored.id = uuid.uuid4()
            self._users[stored.id] = stored

        logger.debug(f"Inserted user {stored.id}")
        return stored.copy()

    def update(self, user: UserEntity) -> None:
        with self._lock:
            existing = self._users.get(user.id)
            if existing is None:
                return
            existing.assign(user.login, user.first_name, user.last_name)

    def upsert_by_id(self, user_id: uuid.UUID, user: UserEntity) -> Tuple[UserEntity, bool]:
        with self._lock:
            existing = self._users.get(user_id)
            if existing is not None:
                existing.assign(user.login, user.first_name, user.last_name)
                return existing.copy(), False

            stored = user.copy()
            stored.id = user_id
            self._users[user_id] = stored
            return stored.copy(), True

    def delete(self, user_id: uuid.UUID) -> None:
        with self._lock:
            self._users.pop(user_id, None)

    def get_page(self, page_number: int, page_size: int) -> PageList:
        """
        Args:
            page_number: 1-based. Values below 1 are treated as 1.
            page_size: Values below 1 are treated as 1.
        """
        page_number = max(1, page_number)
        page_size = max(1, page_size)
        offset = (page_number - 1) * page_size

        with self._lock:
            users = list(self._users.values())
            items = [user.copy() for user in users[offset:offset + page_size]]
            total = len(users)

        return PageList(
            items=items,
            total_count=total,
            current_page=page_number,
            page_size=page_size,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
