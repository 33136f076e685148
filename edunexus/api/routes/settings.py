"""Public settings read. The login page needs the maintenance flag and banner."""

from fastapi import APIRouter

from edunexus.api.deps import StoreDep
from edunexus.schemas.settings import SystemSettingsRead

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SystemSettingsRead)
async def read_settings(store: StoreDep) -> SystemSettingsRead:
    ref = store.system_settings
    current = await ref.reload()
    return SystemSettingsRead.model_validate(current).model_copy(update={"is_default": ref.is_default})
