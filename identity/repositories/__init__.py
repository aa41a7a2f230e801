from .user import UserRepository, order_by_logins
from .user_mapper import SqlAlchemyUserMapper

__all__ = ["SqlAlchemyUserMapper", "UserRepository", "order_by_logins"]
