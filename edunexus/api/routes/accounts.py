"""Self-service account routes."""

from datetime import timedelta

from fastapi import APIRouter, HTTPException, status

from edunexus.api.deps import CurrentAccount, StoreDep, SystemSettingsDep
from edunexus.db.base import now_ms
from edunexus.db.models import SubscriptionPlan, UserRole
from edunexus.errors import FeatureDisabledError
from edunexus.schemas.accounts import AccountRead, SubscriptionUpdate

router = APIRouter(prefix="/accounts", tags=["accounts"])

PAID_PLAN_PERIOD = timedelta(days=30)


@router.patch("/me/subscription", response_model=AccountRead)
async def update_subscription(
    data: SubscriptionUpdate,
    current_account: CurrentAccount,
    store: StoreDep,
    system_settings: SystemSettingsDep,
) -> AccountRead:
    """
    Switch the caller's plan. Payment is simulated.

    Paid plans run for 30 days from now; FREE has no expiry.
    """
    if not system_settings.enable_payments:
        raise FeatureDisabledError("Payments are currently disabled.")
    if current_account.role == UserRole.GUEST.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Guests cannot subscribe. Register an account first.",
        )

    current_account.subscription = data.plan
    if data.plan == SubscriptionPlan.FREE.value:
        current_account.subscription_expiry = None
    else:
        current_account.subscription_expiry = now_ms() + int(PAID_PLAN_PERIOD.total_seconds() * 1000)

    account = await store.accounts.update(current_account, expected_version=current_account.version)
    return AccountRead.model_validate(account)
