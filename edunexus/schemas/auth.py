"""Authentication schemas."""

from pydantic import EmailStr, Field

from edunexus.schemas.accounts import AccountRead
from edunexus.schemas.base import BaseSchema


class LoginRequest(BaseSchema):
    """Request schema for username login."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str | None = Field(None, max_length=128)


class RegisterRequest(BaseSchema):
    """Request schema for creating an account."""

    username: str = Field(..., min_length=1, max_length=64, pattern=r"^\S+$")
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=1, max_length=128)


class TokenResponse(BaseSchema):
    """Response schema for successful authentication."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiry in seconds")
    account: AccountRead
