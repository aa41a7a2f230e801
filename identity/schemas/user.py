"""
Pydantic schemas defining the contract between callers and the user
repository for filtered searches.
"""

from pydantic import BaseModel, Field


class UserQuery(BaseModel):
    """
    Filters for UserRepository.search. Every filter is optional; an empty
    query returns all active users ordered by login.
    """

    logins: list[str] | None = Field(default=None, description="Restrict the search to these logins")
    include_deactivated: bool = Field(default=False, description="Also return deactivated users")
    search_text: str | None = Field(
        default=None, min_length=1, description="Case-insensitive fragment of the login, name or email"
    )
    page_size: int | None = Field(default=None, gt=0, description="Maximum number of users returned")
