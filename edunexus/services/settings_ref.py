"""Explicit, reloadable reference to the platform settings."""

import logging

from edunexus.access.settings import SettingsRepository
from edunexus.db.models import SystemSettings
from edunexus.db.seed import default_settings

logger = logging.getLogger(__name__)


class SystemSettingsRef:
    """
    Holds the settings snapshot that components are given.

    Nothing reads settings ambiently: callers pass ``ref.current`` along and
    call ``reload()`` when they want fresh values. A missing record installs
    the compiled-in defaults and sets ``is_default`` so the fallback is visible.
    """

    def __init__(self, repository: SettingsRepository):
        self._repository = repository
        self.current: SystemSettings = default_settings()
        self.is_default = True
        self._missing_logged = False

    async def reload(self) -> SystemSettings:
        stored = await self._repository.read()
        if stored is None:
            if not self._missing_logged:
                logger.warning("Settings record missing; using compiled-in defaults")
                self._missing_logged = True
            self.current = default_settings()
            self.is_default = True
        else:
            self.current = stored
            self.is_default = False
            self._missing_logged = False
        return self.current
