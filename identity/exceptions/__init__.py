from .base import IdentityError
from .db import RowNotFoundError

__all__ = ["IdentityError", "RowNotFoundError"]
