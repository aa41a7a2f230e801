from .user import UserQuery

__all__ = ["UserQuery"]
