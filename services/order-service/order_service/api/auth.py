"""
Order Service — Role login
"""
from fastapi import APIRouter, HTTPException, status

from order_service.core.config import get_settings
from order_service.core.security import create_access_token, verify_role_password
from order_service.schemas.auth import LoginRequest, TokenResponse

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest):
    """Exchange the shared role password for a bearer token."""
    if not verify_role_password(payload.role, payload.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(
        access_token=create_access_token(payload.role),
        role=payload.role,
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
