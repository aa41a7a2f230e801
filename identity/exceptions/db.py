from .base import IdentityError


class RowNotFoundError(IdentityError):
    """
    Raised by the "or fail" lookups when the requested row does not exist.
    Plain lookups return None instead.
    """
