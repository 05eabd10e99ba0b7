from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, RefreshRequest, UserResponse
from app.core.security import hash_password, verify_password, create_access_token, create_refresh_token, decode_token
from app.core.audit import audit_login_success, audit_login_failed, audit_register
from app.core.rate_limit import client_ip
from app.api.v1.deps import get_current_user

router = APIRouter()

MIN_PASSWORD_LENGTH = 8


def _issue_tokens(user_id: str) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token({"sub": user_id}),
        refresh_token=create_refresh_token({"sub": user_id}),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED,
             summary="Register a new user",
             description="Create a new user account. Password must be at least 8 characters.")
async def register(req: RegisterRequest, request: Request, db: AsyncSession = Depends(get_db)):
    if len(req.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    result = await db.execute(select(User).where(User.email == req.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        email=req.email,
        hashed_password=hash_password(req.password),
        display_name=req.display_name,
    )
    db.add(user)
    await db.flush()

    audit_register(str(user.id), req.email, client_ip(request))
    return _issue_tokens(str(user.id))


@router.post("/login", response_model=TokenResponse, summary="Login and get JWT tokens")
async def login(req: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    ip = client_ip(request)
    ua = request.headers.get("user-agent", "")

    result = await db.execute(select(User).where(User.email == req.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(req.password, user.hashed_password):
        audit_login_failed(req.email, ip, ua)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        audit_login_failed(req.email, ip, ua, reason="inactive")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    audit_login_success(str(user.id), req.email, ip, ua)
    return _issue_tokens(str(user.id))


@router.post("/refresh", response_model=TokenResponse, summary="Refresh JWT tokens")
async def refresh(req: RefreshRequest):
    payload = decode_token(req.refresh_token)
    if not payload or payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return _issue_tokens(payload.get("sub"))


@router.get("/me", response_model=UserResponse, summary="Get current user profile")
async def me(user: User = Depends(get_current_user)):
    return UserResponse.from_user(user)
