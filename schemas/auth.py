# schemas/auth.py
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
     login: str = Field(..., min_length=1, description="Username or email")
     password: str = Field(..., min_length=1)


class ActorResponse(BaseModel):
     id: int
     username: str
     role: str


class TokenResponse(BaseModel):
     access_token: str
     token_type: str = "bearer"
     expires_in: int
     user: ActorResponse
