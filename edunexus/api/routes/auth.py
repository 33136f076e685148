"""
Authentication Routes

Endpoints:
- POST /auth/register - Create an account and start a session
- POST /auth/login - Sign in by username (and password, if the account has one)
- POST /auth/guest - Transient guest session, nothing stored
- POST /auth/logout - Clear session
- GET /auth/me - Get current account profile

Security:
- Login rejections are domain errors mapped to status codes in edunexus.main
- JWT is HttpOnly cookie + response body (client chooses how to use)
"""

from fastapi import APIRouter, Response, status

from edunexus.api.deps import CurrentAccount, StoreDep
from edunexus.config import get_settings
from edunexus.schemas.accounts import AccountRead
from edunexus.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from edunexus.services.session_holder import SessionHolder

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


def _session_response(session: SessionHolder, response: Response) -> TokenResponse:
    """Set the session cookie and build the token body."""
    expires_in = settings.jwt_expire_minutes * 60

    # For cross-domain deployments, use samesite="none" + secure=True
    response.set_cookie(
        key="access_token",
        value=session.token,
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
        max_age=expires_in,
    )

    return TokenResponse(
        access_token=session.token,
        expires_in=expires_in,
        account=AccountRead.model_validate(session.account),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    store: StoreDep,
) -> TokenResponse:
    """
    Create an account and sign it in.

    A taken username is a 409; the existing account is left alone.
    """
    session = SessionHolder(store)
    await session.register(
        request.username,
        request.full_name,
        email=request.email or "",
        password=request.password,
    )
    return _session_response(session, response)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    store: StoreDep,
) -> TokenResponse:
    session = SessionHolder(store)
    await session.login(request.username, request.password)
    return _session_response(session, response)


@router.post("/guest", response_model=TokenResponse)
async def guest(response: Response, store: StoreDep) -> TokenResponse:
    """Start a GUEST session. Guests are never written to the store."""
    session = SessionHolder(store)
    await session.continue_as_guest()
    return _session_response(session, response)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """
    Clear the authentication session.

    Note: This only clears the cookie. If the client stored the JWT
    elsewhere, it remains valid until expiry.
    """
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
    )


@router.get("/me", response_model=AccountRead)
async def get_me(current_account: CurrentAccount) -> AccountRead:
    """Get the current account. Useful after a page reload to check the session."""
    return AccountRead.model_validate(current_account)
