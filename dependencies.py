# dependencies.py
"""
Request-scoped access gate.

Every protected route receives an ActorContext built from the bearer token
of that request and the current state of the user it names; nothing about
the caller is kept in module state.
"""
from dataclasses import dataclass
from typing import Callable, Iterable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

import config
from database import get_session
from exceptions import ForbiddenError, UnauthorizedError
from logging_config import LogContext
from models import User
from security import decode_access_token


@dataclass(frozen=True)
class ActorContext:
     user_id: int
     username: str
     role: str

     def has_role(self, roles: Iterable[str]) -> bool:
          return self.role in roles


async def get_actor(request: Request, db: Session = Depends(get_session)) -> ActorContext:
     """
     Authenticate the request.

     401 on a missing, malformed, expired or invalid token, and when the
     token's user no longer exists or has been deactivated. The role comes
     from the user row, not from the token.
     """
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise UnauthorizedError("Missing token")
     token = auth.split(" ", 1)[1].strip()
     if not token:
          raise UnauthorizedError("Missing token")

     claims = decode_access_token(token)
     try:
          user_id = int(claims["sub"])
     except (KeyError, TypeError, ValueError) as exc:
          raise UnauthorizedError("Invalid token claims") from exc

     user = db.query(User).filter(User.id == user_id).one_or_none()
     if user is None or not user.is_active:
          raise UnauthorizedError("Account is unknown or inactive")

     actor = ActorContext(user_id=user.id, username=user.username, role=user.role.value)
     LogContext.set(actor_id=actor.user_id)
     return actor


def require_roles(*roles: str) -> Callable:
     """Dependency factory: 403 unless the actor has one of ``roles``."""

     async def _check(actor: ActorContext = Depends(get_actor)) -> ActorContext:
          if not actor.has_role(roles):
               raise ForbiddenError(role=actor.role)
          return actor

     return _check


require_payment_recorder = require_roles(*config.PAYMENT_ROLES)
require_admin = require_roles(*config.ADMIN_ROLES)
