from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from identity.db.base import Base

from .definitions import User

# Global (or per-project) property naming the login that receives unassigned issues
DEFAULT_ISSUE_ASSIGNEE = "sonar.issues.defaultAssigneeLogin"


# --- 1. GROUPS (Dimensions) ---


class Group(Base):
    """
    The Group Table (T_Group).
    Named collections of users used to grant permissions in bulk.
    """

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique Group ID.")
    name: Mapped[str] = mapped_column(String(500), nullable=False, unique=True, comment="Group name.")
    description: Mapped[None | str] = mapped_column(String(200), nullable=True, comment="Free text description.")


# --- 2. DATA OWNED BY A USER (purged on deactivation) ---


class GroupMembership(Base):
    """
    The Group Membership Table (T_GroupsUsers).
    Links a user to each group they belong to.
    """

    __tablename__ = "groups_users"

    user_id: Mapped[int] = mapped_column(
        ForeignKey(User.id), primary_key=True, index=True, comment="The member user."
    )
    group_id: Mapped[int] = mapped_column(
        ForeignKey(Group.id), primary_key=True, index=True, comment="The group the user belongs to."
    )


class UserRole(Base):
    """
    The User Role Table (T_UserRole).
    Permissions granted directly to a user, either globally (resource_id NULL)
    or on a single resource.
    """

    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique role assignment ID.")
    user_id: Mapped[int] = mapped_column(
        ForeignKey(User.id), nullable=False, index=True, comment="The user holding the role."
    )
    resource_id: Mapped[None | int] = mapped_column(
        Integer, nullable=True, comment="Resource the role applies to, NULL for a global permission."
    )
    role: Mapped[str] = mapped_column(String(64), nullable=False, comment="Permission key (e.g., 'admin').")


class Property(Base):
    """
    The Property Table (T_Property).
    Key/value settings. A row is user-scoped when user_id is set; otherwise it
    is a global (resource_id NULL) or a resource-level setting.
    """

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique Property ID.")
    prop_key: Mapped[str] = mapped_column(String(512), nullable=False, index=True, comment="Property key.")
    resource_id: Mapped[None | int] = mapped_column(
        Integer, nullable=True, comment="Resource the setting belongs to, NULL for global settings."
    )
    user_id: Mapped[None | int] = mapped_column(
        ForeignKey(User.id), nullable=True, index=True, comment="Owner of a user-scoped setting."
    )
    text_value: Mapped[None | str] = mapped_column(Text, nullable=True, comment="Property value.")
