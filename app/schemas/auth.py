"""Account and token payloads. These keep snake_case keys, unlike the
camelCase brand and document envelopes."""

from pydantic import BaseModel, EmailStr


class Credentials(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(Credentials):
    display_name: str | None = None


class LoginRequest(Credentials):
    pass


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    email: str
    display_name: str | None
    is_active: bool
    is_verified: bool
    google_email: str | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            display_name=user.display_name,
            is_active=user.is_active,
            is_verified=user.is_verified,
            google_email=user.google_email,
        )
