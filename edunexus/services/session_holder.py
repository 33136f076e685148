"""
Session Holder: who is signed in.

States:
- UNAUTHENTICATED: initial, and after logout or a failed restore
- RESTORING: transient, while a stored token is being resolved
- AUTHENTICATED: holds a copy of one Account

The held Account is a copy. It is not refreshed when the stored record
changes (an admin blocking the user, a role change); call refresh() to
re-read it. Maintenance lockout of an existing session is checked per
request by the HTTP layer, not here.

The session token is a signed JWT whose ``sub`` is the account id. Guest
sessions are not stored; their token carries ``guest`` and ``name`` claims so
the transient account can be rebuilt on restore.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum as PyEnum

import bcrypt
from jose import JWTError, jwt

from edunexus.access.store import Store
from edunexus.config import get_settings
from edunexus.db.base import new_id, now_ms
from edunexus.db.models import Account, SubscriptionPlan, UserRole
from edunexus.errors import (
    AccountBlockedError,
    AccountNotFoundError,
    InvalidCredentialsError,
    MaintenanceModeError,
)

logger = logging.getLogger(__name__)
settings = get_settings()


class SessionState(str, PyEnum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    RESTORING = "RESTORING"
    AUTHENTICATED = "AUTHENTICATED"


# =============================================================================
# TOKENS
# =============================================================================


def create_access_token(account_id: str, *, guest_name: str | None = None) -> str:
    """
    Create a session token for an account.

    Token payload contains:
    - sub: account id
    - exp: expiration timestamp
    - guest/name: only for transient guest sessions
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": account_id,
        "exp": expire,
    }
    if guest_name is not None:
        payload["guest"] = True
        payload["name"] = guest_name
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Return the token claims if valid, None if invalid/expired."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    if not claims.get("sub"):
        return None
    return claims


# =============================================================================
# CREDENTIALS
# =============================================================================


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def role_for_username(username: str) -> str:
    """
    Registration role.

    With username role hints on, "founder" or "admin" anywhere in the name
    (case-insensitive) picks that role. A development shortcut, not a
    permission check.
    """
    if settings.username_role_hints:
        lowered = username.lower()
        if "founder" in lowered:
            return UserRole.FOUNDER.value
        if "admin" in lowered:
            return UserRole.ADMIN.value
    return UserRole.STUDENT.value


def guest_account(account_id: str, full_name: str = "Guest User") -> Account:
    now = now_ms()
    return Account(
        id=account_id,
        username="guest",
        full_name=full_name,
        email="",
        role=UserRole.GUEST.value,
        subscription=SubscriptionPlan.FREE.value,
        is_blocked=False,
        created_at=now,
        last_login=now,
        version=1,
    )


# =============================================================================
# SESSION HOLDER
# =============================================================================


class SessionHolder:
    """Tracks the authenticated identity for one client session."""

    def __init__(self, store: Store):
        self._accounts = store.accounts
        self._system_settings = store.system_settings
        self.state = SessionState.UNAUTHENTICATED
        self.account: Account | None = None
        self.token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def is_guest(self) -> bool:
        return self.account is not None and self.account.role == UserRole.GUEST.value

    def _authenticate(self, account: Account, token: str | None = None) -> Account:
        self.account = account
        self.token = token or create_access_token(account.id)
        self.state = SessionState.AUTHENTICATED
        return account

    def _clear(self) -> None:
        self.account = None
        self.token = None
        self.state = SessionState.UNAUTHENTICATED

    async def restore(self, token: str | None) -> Account | None:
        """
        Resolve a previously issued token.

        Ends AUTHENTICATED only for an existing, non-blocked account (or a
        guest token); anything else ends UNAUTHENTICATED.
        """
        if not token:
            self._clear()
            return None

        self.state = SessionState.RESTORING
        claims = decode_access_token(token)
        if claims is None:
            self._clear()
            return None

        if claims.get("guest"):
            return self._authenticate(guest_account(claims["sub"], claims.get("name", "Guest User")), token)

        try:
            account = await self._accounts.read(claims["sub"])
        except Exception:
            self._clear()
            raise

        if account is None or account.is_blocked:
            self._clear()
            return None
        return self._authenticate(account, token)

    async def login(self, username: str, password: str | None = None) -> Account:
        """
        Sign in by username.

        Rejections, in order: unknown username, wrong password (only for
        accounts that have one), maintenance mode for non-staff, blocked.
        """
        system_settings = await self._system_settings.reload()
        account = await self._accounts.read_by_username(username)
        if account is None:
            raise AccountNotFoundError()

        if account.password_hash and not verify_password(password or "", account.password_hash):
            raise InvalidCredentialsError()

        if system_settings.maintenance_mode and not account.is_staff:
            raise MaintenanceModeError()

        if account.is_blocked:
            raise AccountBlockedError()

        account = await self._accounts.touch_login(account, now_ms())
        if account is None:
            raise AccountNotFoundError()
        if account.is_blocked:
            raise AccountBlockedError()
        logger.info("Account %s signed in", account.id)
        return self._authenticate(account)

    async def register(
        self,
        username: str,
        full_name: str,
        email: str = "",
        password: str | None = None,
    ) -> Account:
        """
        Create an account and sign it in.

        DuplicateKeyError from the store propagates untouched; the existing
        account is not modified.
        """
        system_settings = await self._system_settings.reload()
        if system_settings.maintenance_mode:
            raise MaintenanceModeError("Registrations disabled during maintenance.")

        now = now_ms()
        account = Account(
            id=new_id("u"),
            username=username,
            full_name=full_name,
            email=email,
            role=role_for_username(username),
            subscription=SubscriptionPlan.FREE.value,
            is_blocked=False,
            created_at=now,
            last_login=now,
            password_hash=hash_password(password) if password else None,
            version=1,
        )
        account = await self._accounts.create(account)
        logger.info("Registered account %s with role %s", account.id, account.role)
        return self._authenticate(account)

    async def continue_as_guest(self) -> Account:
        """Transient GUEST session; nothing is written to the store."""
        system_settings = await self._system_settings.reload()
        if system_settings.maintenance_mode:
            raise MaintenanceModeError("Guest access disabled during maintenance.")

        account = guest_account(new_id("guest"))
        return self._authenticate(account, create_access_token(account.id, guest_name=account.full_name))

    async def refresh(self) -> Account | None:
        """Re-read the held account; a deleted or blocked account signs out."""
        if self.account is None or self.is_guest:
            return self.account

        account = await self._accounts.read(self.account.id)
        if account is None or account.is_blocked:
            self._clear()
            return None
        self.account = account
        return account

    def logout(self) -> None:
        self._clear()
