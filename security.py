# security.py
"""
Password hashing and access tokens.

Tokens are HS256 JWTs carrying the user's id (``sub``), username and role;
the role is re-checked on every request by the dependencies in
dependencies.py.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

import config
from exceptions import UnauthorizedError

# Bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
     return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
     return pwd_context.verify(password, hashed)


def create_access_token(user, expires_minutes: Optional[int] = None) -> str:
     """Issue a signed token for ``user`` (any object with id, username and role)."""
     minutes = expires_minutes if expires_minutes is not None else config.JWT_EXPIRE_MINUTES
     role = getattr(user.role, "value", user.role)
     payload = {
          "sub": str(user.id),
          "username": user.username,
          "role": role,
          "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
     }
     return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
     """
     Verify signature and expiry and return the claims.

     Raises:
          UnauthorizedError: token is malformed, expired, or signed with another key
     """
     try:
          claims = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
     except JWTError as exc:
          raise UnauthorizedError("Invalid or expired token") from exc

     if not claims.get("sub") or not claims.get("role"):
          raise UnauthorizedError("Invalid token claims")
     return claims
