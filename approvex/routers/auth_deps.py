"""
Request-scoped dependencies: acting user, authorization capability and the
post-decision effect dispatcher.

Authentication itself happens upstream; the gateway forwards the resolved
user id in the X-User-Id header.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from approvex.core.config import settings
from approvex.core.exceptions import AccessDeniedError, AuthenticationError
from approvex.database import get_db
from approvex.models.user import User
from approvex.services.authorization import AuthorizationContext, RoleTableAuthorization
from approvex.services.effects import TransitionEffects

logger = logging.getLogger(__name__)


def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias=settings.actor_header),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolves the acting user from the forwarded identity header.
    """
    if not x_user_id:
        logger.warning("Authentication failed: missing X-User-Id header")
        raise AuthenticationError("Missing X-User-Id header")
    try:
        user_id = int(x_user_id)
    except ValueError:
        logger.warning(f"Authentication failed: malformed user id {x_user_id!r}")
        raise AuthenticationError("Malformed X-User-Id header")

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Authentication failed: user {user_id} not found")
        raise AuthenticationError("User not found")
    if not user.is_active:
        logger.warning(f"Authentication failed: user {user_id} is inactive")
        raise AccessDeniedError("User is inactive")
    return user


def get_authorization(db: Session = Depends(get_db)) -> AuthorizationContext:
    return RoleTableAuthorization(db)


def get_transition_effects(db: Session = Depends(get_db)) -> TransitionEffects:
    return TransitionEffects(db)


def require_manager(
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
) -> User:
    if not authz.is_manager(current_user.id):
        raise AccessDeniedError("Manager access required")
    return current_user
