from collections.abc import Collection, Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from identity.config import Settings, get_settings
from identity.core.clock import SystemClock
from identity.core.protocols import Clock, UserMapper
from identity.db.utils import execute_large_inputs
from identity.exceptions import RowNotFoundError
from identity.models import SCM_ACCOUNTS_SEPARATOR, User
from identity.schemas import UserQuery

from .user_mapper import SqlAlchemyUserMapper


def order_by_logins(logins: Iterable[str], unordered: Iterable[User]) -> list[User]:
    """
    Puts the users of an unordered result back into the order of ``logins``.

    One entry is produced per input login that resolved, so a login repeated
    in the input yields the same user several times. Logins without a user are
    dropped, no placeholder is emitted.
    """
    by_login = {user.login: user for user in unordered}
    return [by_login[login] for login in logins if login in by_login]


class UserRepository:
    """
    Manages data access for the User identity and the data a user owns in
    other tables (group memberships, properties, roles).
    Never commits: every statement runs inside the caller's transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock | None = None,
        settings: Settings | None = None,
        mapper: UserMapper | None = None,
    ):
        self.session = session
        self.mapper: UserMapper = mapper or SqlAlchemyUserMapper(session)
        self._clock = clock or SystemClock()
        self._partition_size = (settings or get_settings()).max_bind_parameters

    # --- 1. LOOKUPS ---

    async def get_by_id(self, user_id: int) -> User | None:
        """Retrieves a User by their primary ID, including deactivated users."""
        return await self.mapper.select_user(user_id)

    async def get_by_ids(self, ids: Collection[int]) -> list[User]:
        """
        Retrieves users by ids, including deactivated users. An empty list is
        returned for empty ids, without any database round trip.
        """
        return await execute_large_inputs(ids, self.mapper.select_by_ids, self._partition_size)

    async def get_active_by_login(self, login: str) -> User | None:
        """Retrieves an active User by login. Deactivated users are not returned."""
        return await self.mapper.select_active_user_by_login(login)

    async def get_by_login(self, login: str) -> User | None:
        """Retrieves a User by login, including deactivated users."""
        return await self.mapper.select_by_login(login)

    async def get_by_login_or_fail(self, login: str) -> User:
        """
        Same as get_by_login but the user must exist.

        Raises:
            RowNotFoundError: If no user has this login.
        """
        user = await self.get_by_login(login)
        if user is None:
            raise RowNotFoundError(f"User with login '{login}' has not been found")
        return user

    async def get_by_logins(self, logins: Collection[str]) -> list[User]:
        """
        Retrieves users by logins, including deactivated users. The result is
        NOT ordered like the input. An empty list is returned for empty logins,
        without any database round trip.
        """
        return await execute_large_inputs(logins, self.mapper.select_by_logins, self._partition_size)

    async def get_by_ordered_logins(self, logins: Collection[str]) -> list[User]:
        """
        Like get_by_logins, but the result follows the order of the input.
        Unknown logins are skipped, so the result may be shorter than the input.
        """
        unordered = await self.get_by_logins(logins)
        return order_by_logins(logins, unordered)

    async def search(self, query: UserQuery) -> Sequence[User]:
        """
        Filtered search, ordered by login. See UserQuery for the filters.

        More logins than the bind-parameter ceiling are queried chunk by chunk;
        the chunks are then merged, re-ordered by login and cut to page_size.
        """
        if query.logins is None or len(query.logins) <= self._partition_size:
            return await self.mapper.select_users(query)

        async def _select_chunk(logins: list[str]) -> Sequence[User]:
            return await self.mapper.select_users(query.model_copy(update={"logins": logins}))

        found = await execute_large_inputs(query.logins, _select_chunk, self._partition_size)
        # A login repeated in two chunks comes back twice
        users = sorted({user.id: user for user in found}.values(), key=lambda user: user.login)
        return users[: query.page_size] if query.page_size is not None else users

    async def get_by_scm_account_or_login_or_email(self, value: str) -> Sequence[User]:
        """
        Retrieves the active users whose login or email is ``value`` or who
        declare ``value`` as one of their SCM accounts.
        """
        # Wrapping with the separator restricts the match to a whole entry. A value
        # holding the separator itself would span two entries, so it is no SCM account.
        scm_account = None
        if SCM_ACCOUNTS_SEPARATOR not in value:
            scm_account = f"{SCM_ACCOUNTS_SEPARATOR}{value}{SCM_ACCOUNTS_SEPARATOR}"
        return await self.mapper.select_by_scm_account_or_login_or_email(value, scm_account)

    async def count_root_users_but_login(self, login: str) -> int:
        """Number of active root users other than ``login``."""
        return await self.mapper.count_root_users_but_login(login)

    async def email_exists(self, email: str) -> bool:
        """
        Checks if an active user has this email. The comparison ignores case:
        'mail@email.com' and 'Mail@Email.com' give the same answer. Both the
        argument and the stored email are folded by the store's lower().
        """
        return await self.mapper.count_by_email(email) > 0

    # --- 2. WRITES ---

    async def insert(self, user: User) -> User:
        """Persists a new User. Missing audit timestamps are stamped from the clock."""
        now = self._clock.now()
        if user.created_at is None:
            user.created_at = now
        if user.updated_at is None:
            user.updated_at = user.created_at
        await self.mapper.insert(user)
        return user

    async def update(self, user: User) -> User:
        """Replaces the mutable fields of the User identified by ``user.id``."""
        await self.mapper.update(user)
        return user

    async def set_root(self, login: str, root: bool) -> None:
        await self.mapper.set_root(login, root, self._clock.now())

    async def deactivate(self, user_id: int) -> None:
        """Clears the active flag. The row itself is kept."""
        await self.mapper.deactivate_user(user_id, self._clock.now())

    # --- 3. DATA OWNED BY A USER ---

    async def remove_from_groups(self, user_id: int) -> None:
        await self.mapper.remove_user_from_groups(user_id)

    async def delete_user_properties(self, user_id: int) -> None:
        await self.mapper.delete_user_properties(user_id)

    async def delete_user_roles(self, user_id: int) -> None:
        await self.mapper.delete_user_roles(user_id)

    async def delete_properties_matching_login(self, prop_keys: Sequence[str], login: str) -> None:
        await self.mapper.delete_properties_matching_login(prop_keys, login)
