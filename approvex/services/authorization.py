"""
Manager capability check.

The approval workflow only asks "may this actor decide requests?"; where the
answer comes from is injected. The default is backed by the users table.
"""
from typing import Optional, Protocol

from sqlalchemy.orm import Session

from approvex.models.user import User


class AuthorizationContext(Protocol):
    def is_manager(self, actor_id: Optional[int]) -> bool:
        ...


class RoleTableAuthorization:
    def __init__(self, db: Session):
        self.db = db

    def is_manager(self, actor_id: Optional[int]) -> bool:
        if actor_id is None:
            return False
        user = self.db.get(User, actor_id)
        return bool(user and user.is_active and user.is_manager)
