"""
Order Service — Auth schemas
"""
from pydantic import BaseModel, Field

from order_service.core.security import Role


class LoginRequest(BaseModel):
    role: Role
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role
    expires_in: int  # seconds
