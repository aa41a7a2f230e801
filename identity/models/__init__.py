from .definitions import SCM_ACCOUNTS_SEPARATOR, User, decode_scm_accounts, encode_scm_accounts
from .permissions import DEFAULT_ISSUE_ASSIGNEE, Group, GroupMembership, Property, UserRole

__all__ = [
    "User",
    "Group",
    "GroupMembership",
    "Property",
    "UserRole",
    "DEFAULT_ISSUE_ASSIGNEE",
    "SCM_ACCOUNTS_SEPARATOR",
    "decode_scm_accounts",
    "encode_scm_accounts",
]
