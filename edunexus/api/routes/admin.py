"""
Admin console routes. FOUNDER and ADMIN only.

Endpoints:
- GET /admin/accounts - List every account
- POST /admin/accounts/{id}/block, /unblock - Toggle access
- DELETE /admin/accounts/{id} - Remove an account
- PUT /admin/settings - Replace the platform settings
- POST /admin/settings/toggle/{key} - Flip one feature flag

FOUNDER accounts cannot be blocked or deleted through the console.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from edunexus.api.deps import StaffAccount, StoreDep
from edunexus.db.models import Account, SystemSettings, UserRole
from edunexus.schemas.accounts import AccountRead
from edunexus.schemas.settings import SettingsToggle, SystemSettingsRead, SystemSettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _get_modifiable_account(store: StoreDep, account_id: str) -> Account:
    account = await store.accounts.read(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    if account.role == UserRole.FOUNDER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Founder accounts cannot be modified",
        )
    return account


# =============================================================================
# ACCOUNTS
# =============================================================================


@router.get("/accounts", response_model=list[AccountRead])
async def list_accounts(staff: StaffAccount, store: StoreDep) -> list[AccountRead]:
    accounts = await store.accounts.read_all()
    return [AccountRead.model_validate(a) for a in accounts]


async def _set_blocked(store: StoreDep, account_id: str, blocked: bool) -> AccountRead:
    account = await _get_modifiable_account(store, account_id)
    account.is_blocked = blocked
    account = await store.accounts.update(account, expected_version=account.version)
    logger.info("Account %s %s", account.id, "blocked" if blocked else "unblocked")
    return AccountRead.model_validate(account)


@router.post("/accounts/{account_id}/block", response_model=AccountRead)
async def block_account(account_id: str, staff: StaffAccount, store: StoreDep) -> AccountRead:
    """Block an account. Its existing sessions stop restoring."""
    return await _set_blocked(store, account_id, True)


@router.post("/accounts/{account_id}/unblock", response_model=AccountRead)
async def unblock_account(account_id: str, staff: StaffAccount, store: StoreDep) -> AccountRead:
    return await _set_blocked(store, account_id, False)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: str, staff: StaffAccount, store: StoreDep) -> None:
    """Delete an account. Its messages and tickets are kept."""
    await _get_modifiable_account(store, account_id)
    await store.accounts.delete(account_id)
    logger.info("Account %s deleted by %s", account_id, staff.id)


# =============================================================================
# SETTINGS
# =============================================================================


def _settings_read(store: StoreDep, record: SystemSettings) -> SystemSettingsRead:
    return SystemSettingsRead.model_validate(record).model_copy(
        update={"is_default": store.system_settings.is_default}
    )


@router.put("/settings", response_model=SystemSettingsRead)
async def replace_settings(
    data: SystemSettingsUpdate,
    staff: StaffAccount,
    store: StoreDep,
) -> SystemSettingsRead:
    """
    Replace the settings record.

    With ``expected_version`` the write is rejected (409) if someone else
    saved in between; without it the last writer wins.
    """
    record = SystemSettings(**data.model_dump(exclude={"expected_version"}))
    await store.settings.update(record, expected_version=data.expected_version)
    saved = await store.system_settings.reload()
    return _settings_read(store, saved)


@router.post("/settings/toggle/{key}", response_model=SystemSettingsRead)
async def toggle_setting(
    key: SettingsToggle,
    staff: StaffAccount,
    store: StoreDep,
) -> SystemSettingsRead:
    """Flip one boolean flag on the current settings."""
    current = await store.system_settings.reload()
    values = SystemSettingsRead.model_validate(current).model_dump(exclude={"is_default", "version"})
    values[key] = not values[key]
    expected = None if store.system_settings.is_default else current.version
    await store.settings.update(SystemSettings(**values), expected_version=expected)
    saved = await store.system_settings.reload()
    logger.info("%s set %s=%s", staff.id, key, getattr(saved, key))
    return _settings_read(store, saved)
