"""Deactivate User: cascading, all-or-nothing deactivation by login.

Invariants:
    - Unknown login returns False and leaves every table untouched
    - The user row survives with is_active=False and a fresh updated_at
    - Memberships, user properties, roles and default-assignee settings naming the user are purged
    - Data of other users and unrelated settings are kept
    - A failure in the middle of the cascade rolls back everything
"""

from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from identity.models import DEFAULT_ISSUE_ASSIGNEE, Group, GroupMembership, Property, User, UserRole

LATER = datetime(2026, 3, 2, 9, 30, 0)


async def _count(db, model, *criteria) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*criteria))


@pytest.fixture
async def seeded(test_db, make_user):
    """Two users sharing groups, roles and settings; returns their ids."""
    ada = await make_user("ada", is_root=True)
    bob = await make_user("bob")
    developers = Group(name="developers")
    admins = Group(name="admins")
    test_db.add_all([developers, admins])
    await test_db.flush()

    test_db.add_all(
        [
            GroupMembership(user_id=ada.id, group_id=developers.id),
            GroupMembership(user_id=ada.id, group_id=admins.id),
            GroupMembership(user_id=bob.id, group_id=developers.id),
            UserRole(user_id=ada.id, role="admin"),
            UserRole(user_id=ada.id, resource_id=10, role="codeviewer"),
            UserRole(user_id=bob.id, role="user"),
            Property(prop_key="favourite", user_id=ada.id, text_value="project-a"),
            Property(prop_key="favourite", user_id=bob.id, text_value="project-b"),
            Property(prop_key=DEFAULT_ISSUE_ASSIGNEE, text_value="ada"),
            Property(prop_key=DEFAULT_ISSUE_ASSIGNEE, resource_id=42, text_value="ada"),
            Property(prop_key=DEFAULT_ISSUE_ASSIGNEE, resource_id=43, text_value="bob"),
            Property(prop_key="sonar.links.homepage", text_value="ada"),
        ]
    )
    await test_db.commit()
    return ada.id, bob.id


async def test_unknown_login_returns_false_and_changes_nothing(user_service, test_db, seeded):
    assert await user_service.deactivate_user_by_login("ghost") is False

    assert await _count(test_db, GroupMembership) == 3
    assert await _count(test_db, UserRole) == 3
    assert await _count(test_db, Property) == 6
    assert await _count(test_db, User, User.is_active.is_(True)) == 2


async def test_deactivation_keeps_the_user_row(user_service, user_repo, test_db, clock, seeded):
    clock.current = LATER

    assert await user_service.deactivate_user_by_login("ada") is True

    assert await user_repo.get_active_by_login("ada") is None
    ada = await user_repo.get_by_login("ada")
    assert ada is not None
    assert ada.is_active is False
    row = (await test_db.execute(select(User.is_active, User.updated_at).where(User.login == "ada"))).one()
    assert row.is_active is False
    assert row.updated_at.replace(tzinfo=None) == LATER


async def test_deactivation_purges_data_owned_by_the_user(user_service, test_db, seeded):
    ada_id, bob_id = seeded

    await user_service.deactivate_user_by_login("ada")

    assert await _count(test_db, GroupMembership, GroupMembership.user_id == ada_id) == 0
    assert await _count(test_db, UserRole, UserRole.user_id == ada_id) == 0
    assert await _count(test_db, Property, Property.user_id == ada_id) == 0
    assert (
        await _count(
            test_db, Property, Property.prop_key == DEFAULT_ISSUE_ASSIGNEE, Property.text_value == "ada"
        )
        == 0
    )


async def test_deactivation_keeps_other_users_and_unrelated_settings(user_service, test_db, seeded):
    ada_id, bob_id = seeded

    await user_service.deactivate_user_by_login("ada")

    assert await _count(test_db, GroupMembership, GroupMembership.user_id == bob_id) == 1
    assert await _count(test_db, UserRole, UserRole.user_id == bob_id) == 1
    assert await _count(test_db, Property, Property.user_id == bob_id) == 1
    assert await _count(test_db, Property, Property.text_value == "bob", Property.resource_id == 43) == 1
    assert await _count(test_db, Property, Property.prop_key == "sonar.links.homepage") == 1
    assert await _count(test_db, Group) == 2
    assert await test_db.scalar(select(User.is_active).where(User.id == bob_id)) is True


async def test_deactivating_twice_runs_the_cascade_again(user_service, test_db, seeded):
    assert await user_service.deactivate_user_by_login("ada") is True
    assert await user_service.deactivate_user_by_login("ada") is True

    assert await test_db.scalar(select(User.is_active).where(User.login == "ada")) is False


async def test_failure_in_the_cascade_rolls_everything_back(user_service, user_repo, test_db, seeded, monkeypatch):
    ada_id, _ = seeded

    async def _broken(user_id: int) -> None:
        raise OperationalError("DELETE FROM user_roles", {}, Exception("database is locked"))

    monkeypatch.setattr(user_repo, "delete_user_roles", _broken)

    with pytest.raises(OperationalError):
        await user_service.deactivate_user_by_login("ada")

    # Memberships and properties were deleted before the failure, then rolled back
    assert await _count(test_db, GroupMembership, GroupMembership.user_id == ada_id) == 2
    assert await _count(test_db, Property, Property.user_id == ada_id) == 1
    assert await _count(test_db, UserRole, UserRole.user_id == ada_id) == 2
    assert await test_db.scalar(select(User.is_active).where(User.id == ada_id)) is True
