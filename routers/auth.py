# routers/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

import config
from database import get_session
from dependencies import ActorContext, get_actor
from exceptions import UnauthorizedError
from logging_config import get_logger
from models import User
from schemas.auth import ActorResponse, LoginRequest, TokenResponse
from security import create_access_token, verify_password

logger = get_logger("auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login_user(body: LoginRequest, db: Session = Depends(get_session)):
     login = body.login.strip()
     user = db.query(User).filter(or_(User.username == login, User.email == login)).first()

     if not user or not verify_password(body.password, user.password):
          logger.info("login_failed", extra={"login": login})
          raise UnauthorizedError("Invalid credentials")

     if not user.is_active:
          logger.info("login_refused_inactive", extra={"user_id": user.id})
          raise UnauthorizedError("Account is inactive")

     token = create_access_token(user)
     logger.info("login_succeeded", extra={"user_id": user.id})
     return TokenResponse(
          access_token=token,
          expires_in=config.JWT_EXPIRE_MINUTES * 60,
          user=ActorResponse(id=user.id, username=user.username, role=user.role.value),
     )


@router.get("/me", response_model=ActorResponse)
async def read_current_actor(actor: ActorContext = Depends(get_actor)):
     return ActorResponse(id=actor.user_id, username=actor.username, role=actor.role)
