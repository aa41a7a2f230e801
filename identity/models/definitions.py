from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from identity.db.base import Base, TimestampMixin

# Token written before, between and after every SCM account in User.scm_accounts
SCM_ACCOUNTS_SEPARATOR = "\n"


def encode_scm_accounts(scm_accounts: list[str] | None) -> str | None:
    """
    Encodes a list of SCM accounts into the stored form, e.g. ["ada", "ada@corp"]
    becomes "\\nada\\nada@corp\\n". An empty list is stored as NULL.
    """
    if not scm_accounts:
        return None
    return SCM_ACCOUNTS_SEPARATOR + SCM_ACCOUNTS_SEPARATOR.join(scm_accounts) + SCM_ACCOUNTS_SEPARATOR


def decode_scm_accounts(scm_accounts: str | None) -> list[str]:
    if not scm_accounts:
        return []
    return [account for account in scm_accounts.split(SCM_ACCOUNTS_SEPARATOR) if account]


# --- CORE IDENTITY ENTITY ---


class User(Base, TimestampMixin):
    """
    The User Table (T_User).
    The core identity entity. Users are never physically deleted: deactivation
    clears the active flag and purges the data owned by the user elsewhere.

    CRITICAL DESIGN CHOICE: The login is the natural key. It is unique across
    active AND inactive users and never changes once assigned.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique User ID.")

    login: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="User's unique login, used as the natural key.",
    )

    name: Mapped[None | str] = mapped_column(String(200), nullable=True, comment="User's display name.")

    email: Mapped[None | str] = mapped_column(
        String(100),
        nullable=True,
        index=True,
        comment="User's email address, compared case-insensitively.",
    )

    scm_accounts: Mapped[None | str] = mapped_column(
        String(4000),
        nullable=True,
        comment="SCM account identifiers, each one wrapped by SCM_ACCOUNTS_SEPARATOR.",
    )

    is_root: Mapped[bool] = mapped_column(default=False, comment="Indicates a root (administrator) account.")

    is_active: Mapped[bool] = mapped_column(
        default=True, comment="Indicates if the user account is active. Inactive users are kept for history."
    )

    @validates("login")
    def _validate_login(self, key: str, login: str) -> str:
        if self.login is not None and login != self.login:
            raise ValueError(f"Login of user '{self.login}' cannot be changed.")
        return login

    @property
    def scm_accounts_list(self) -> list[str]:
        return decode_scm_accounts(self.scm_accounts)

    @scm_accounts_list.setter
    def scm_accounts_list(self, accounts: list[str] | None) -> None:
        self.scm_accounts = encode_scm_accounts(accounts)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, login={self.login!r}, active={self.is_active!r})"
