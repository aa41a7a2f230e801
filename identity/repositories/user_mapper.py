from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from identity.models import GroupMembership, Property, User, UserRole
from identity.schemas import UserQuery


class SqlAlchemyUserMapper:
    """
    SQLAlchemy implementation of the UserMapper protocol.
    Each method issues exactly one statement on the caller's session and never
    commits; transaction boundaries belong to the caller.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- 1. READS ---

    async def select_user(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def select_by_ids(self, ids: Sequence[int]) -> Sequence[User]:
        stmt = select(User).where(User.id.in_(ids))
        return (await self.session.scalars(stmt)).all()

    async def select_active_user_by_login(self, login: str) -> User | None:
        stmt = select(User).where(User.login == login, User.is_active.is_(True))
        return (await self.session.scalars(stmt)).one_or_none()

    async def select_by_login(self, login: str) -> User | None:
        stmt = select(User).where(User.login == login)
        return (await self.session.scalars(stmt)).one_or_none()

    async def select_by_logins(self, logins: Sequence[str]) -> Sequence[User]:
        stmt = select(User).where(User.login.in_(logins))
        return (await self.session.scalars(stmt)).all()

    async def select_users(self, query: UserQuery) -> Sequence[User]:
        stmt = select(User)
        if query.logins is not None:
            stmt = stmt.where(User.login.in_(query.logins))
        if not query.include_deactivated:
            stmt = stmt.where(User.is_active.is_(True))
        if query.search_text:
            stmt = stmt.where(
                or_(
                    User.login.icontains(query.search_text, autoescape=True),
                    User.name.icontains(query.search_text, autoescape=True),
                    User.email.icontains(query.search_text, autoescape=True),
                )
            )
        stmt = stmt.order_by(User.login)
        if query.page_size is not None:
            stmt = stmt.limit(query.page_size)
        return (await self.session.scalars(stmt)).all()

    async def select_by_scm_account_or_login_or_email(
        self, value: str, scm_account: str | None
    ) -> Sequence[User]:
        """
        Active users whose login or email equals ``value``, or whose SCM account
        list contains ``scm_account`` (the value already wrapped by separators).
        LIKE wildcards inside the value are escaped. A None ``scm_account``
        skips the SCM clause.
        """
        criteria = [User.login == value, User.email == value]
        if scm_account is not None:
            criteria.append(User.scm_accounts.contains(scm_account, autoescape=True))
        stmt = select(User).where(User.is_active.is_(True), or_(*criteria))
        return (await self.session.scalars(stmt)).all()

    async def count_root_users_but_login(self, login: str) -> int:
        stmt = (
            select(func.count())
            .select_from(User)
            .where(User.is_active.is_(True), User.is_root.is_(True), User.login != login)
        )
        return await self.session.scalar(stmt) or 0

    async def count_by_email(self, email: str) -> int:
        # Both sides go through the store's lower() so they are folded by the same rule
        stmt = (
            select(func.count())
            .select_from(User)
            .where(User.is_active.is_(True), func.lower(User.email) == func.lower(email))
        )
        return await self.session.scalar(stmt) or 0

    # --- 2. WRITES ---

    async def insert(self, user: User) -> None:
        self.session.add(user)
        await self.session.flush()

    async def update(self, user: User) -> None:
        # Login, root flag and created_at are not part of a profile update
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(
                name=user.name,
                email=user.email,
                scm_accounts=user.scm_accounts,
                is_active=user.is_active,
                updated_at=user.updated_at,
            )
        )
        # Pending edits on a loaded user must not reach the table through autoflush
        with self.session.no_autoflush:
            await self.session.execute(stmt)
            if user in self.session:
                await self.session.refresh(user, attribute_names=["is_root", "created_at"])

    async def set_root(self, login: str, root: bool, now: datetime) -> None:
        stmt = update(User).where(User.login == login).values(is_root=root, updated_at=now)
        await self.session.execute(stmt)

    async def deactivate_user(self, user_id: int, now: datetime) -> None:
        stmt = update(User).where(User.id == user_id).values(is_active=False, updated_at=now)
        await self.session.execute(stmt)

    # --- 3. DATA OWNED BY A USER ---

    async def remove_user_from_groups(self, user_id: int) -> None:
        await self.session.execute(delete(GroupMembership).where(GroupMembership.user_id == user_id))

    async def delete_user_properties(self, user_id: int) -> None:
        await self.session.execute(delete(Property).where(Property.user_id == user_id))

    async def delete_user_roles(self, user_id: int) -> None:
        await self.session.execute(delete(UserRole).where(UserRole.user_id == user_id))

    async def delete_properties_matching_login(self, prop_keys: Sequence[str], login: str) -> None:
        """Deletes the global and resource-level settings among ``prop_keys`` whose value is ``login``."""
        stmt = delete(Property).where(
            Property.prop_key.in_(prop_keys),
            Property.text_value == login,
            Property.user_id.is_(None),
        )
        await self.session.execute(stmt)
