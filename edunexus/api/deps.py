"""
FastAPI Dependencies for Authentication and Authorization.

Key patterns:
1. get_current_account: Restores the session from the JWT, returns the Account
2. The store is process-wide and lives on app.state; handlers never open sessions
3. No global "current user" state - always pass the account explicitly

Security model:
- JWT stored in HttpOnly cookie (recommended) or Authorization header
- A session restored for a blocked or deleted account is rejected
- Maintenance mode locks non-staff out of every authenticated route
"""

from typing import Annotated

from fastapi import Cookie, Depends, Header, HTTPException, Request, status

from edunexus.access import Store
from edunexus.db.models import Account, SystemSettings
from edunexus.services.chat_service import ChatService
from edunexus.services.session_holder import SessionHolder


def get_store(request: Request) -> Store:
    return request.app.state.store


StoreDep = Annotated[Store, Depends(get_store)]


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """
    Extract JWT token from request.

    Supports two methods (in order of preference):
    1. HttpOnly cookie named 'access_token'
    2. Authorization header: 'Bearer <token>'
    """
    if access_token:
        return access_token

    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_system_settings(store: StoreDep) -> SystemSettings:
    """Fresh settings snapshot for this request."""
    return await store.system_settings.reload()


SystemSettingsDep = Annotated[SystemSettings, Depends(get_system_settings)]


async def get_session(
    token: Annotated[str, Depends(get_token_from_request)],
    store: StoreDep,
) -> SessionHolder:
    """
    Restore the caller's session.

    Raises 401 if the token is invalid or expired, or the account no longer
    exists or is blocked.
    """
    session = SessionHolder(store)
    if await session.restore(token) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


async def get_current_account(
    session: Annotated[SessionHolder, Depends(get_session)],
    system_settings: SystemSettingsDep,
) -> Account:
    """
    The authenticated account, unless maintenance locks it out.

        @router.get("/groups")
        async def list_groups(account: CurrentAccount):
            ...
    """
    account = session.account
    if system_settings.maintenance_mode and not account.is_staff:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="MAINTENANCE ACTIVE: Admin access only.",
        )
    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]


# =============================================================================
# AUTHORIZATION HELPERS
# =============================================================================


async def require_staff(account: CurrentAccount) -> Account:
    """Admin console routes: FOUNDER and ADMIN only."""
    if not account.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return account


StaffAccount = Annotated[Account, Depends(require_staff)]


def get_chat_service(store: StoreDep) -> ChatService:
    return ChatService(store)


ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
