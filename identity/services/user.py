import logging

from sqlalchemy.ext.asyncio import AsyncSession

from identity.models import DEFAULT_ISSUE_ASSIGNEE
from identity.repositories import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession, user_repo: UserRepository):
        self._session = session
        self._user_repo = user_repo

    # --- USER DEACTIVATION (Atomic Operation) ---

    async def deactivate_user_by_login(self, login: str) -> bool:
        """
        Deactivates a user ATOMICALLY: drops their group memberships, settings,
        permissions and the default-assignee settings pointing at them, then
        clears the active flag. The user row itself is kept.

        The lookup includes deactivated users, so deactivating twice runs the
        cascade again and returns True both times.

        Returns:
            False if no user has this login, True once the user is deactivated.
        """
        user = await self._user_repo.get_by_login(login)
        if user is None:
            logger.debug("No user with login %r to deactivate", login)
            return False

        # --- START ATOMIC TRANSACTION ---
        try:
            await self._user_repo.remove_from_groups(user.id)
            await self._user_repo.delete_user_properties(user.id)
            await self._user_repo.delete_user_roles(user.id)
            await self._user_repo.delete_properties_matching_login([DEFAULT_ISSUE_ASSIGNEE], user.login)
            await self._user_repo.deactivate(user.id)
            await self._session.commit()
        except Exception:
            logger.warning("Deactivation of %r failed, rolling back", login, extra={"login": login})
            await self._session.rollback()
            raise
        # --- END ATOMIC TRANSACTION ---

        logger.info("Deactivated user %r", login, extra={"login": login, "user_id": user.id})
        return True
