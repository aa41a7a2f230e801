"""Boundary Protocols: contracts between the identity core and its collaborators.

Invariants:
    - Every statement the repository issues is listed here as a typed method
    - Implementations are provided per backing store and injected, never looked up by name
    - Clock is the only source of "now" for audit timestamps
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from identity.models import User
from identity.schemas import UserQuery


class Clock(Protocol):
    """Source of the current time used to stamp updated_at."""

    def now(self) -> datetime: ...


class UserMapper(Protocol):
    """One method per statement on the users table and the data owned by a user."""

    # Reads
    async def select_user(self, user_id: int) -> User | None: ...
    async def select_by_ids(self, ids: Sequence[int]) -> Sequence[User]: ...
    async def select_active_user_by_login(self, login: str) -> User | None: ...
    async def select_by_login(self, login: str) -> User | None: ...
    async def select_by_logins(self, logins: Sequence[str]) -> Sequence[User]: ...
    async def select_users(self, query: UserQuery) -> Sequence[User]: ...
    async def select_by_scm_account_or_login_or_email(
        self, value: str, scm_account: str | None
    ) -> Sequence[User]: ...
    async def count_root_users_but_login(self, login: str) -> int: ...
    async def count_by_email(self, email: str) -> int: ...

    # Writes
    async def insert(self, user: User) -> None: ...
    async def update(self, user: User) -> None: ...
    async def set_root(self, login: str, root: bool, now: datetime) -> None: ...
    async def deactivate_user(self, user_id: int, now: datetime) -> None: ...

    # Data owned by a user
    async def remove_user_from_groups(self, user_id: int) -> None: ...
    async def delete_user_properties(self, user_id: int) -> None: ...
    async def delete_user_roles(self, user_id: int) -> None: ...
    async def delete_properties_matching_login(self, prop_keys: Sequence[str], login: str) -> None: ...
