"""The single SystemSettings record."""

from edunexus.access.base import Repository
from edunexus.db.models import SETTINGS_KEY, SystemSettings
from edunexus.services.feed import SETTINGS_TOPIC


class SettingsRepository(Repository[SystemSettings]):
    """
    Settings live under the fixed key ``global``.

    read() returns None when the record is missing; falling back to defaults
    is the caller's explicit decision (see SystemSettingsRef).
    """

    model = SystemSettings

    def _changed(self, record: SystemSettings) -> None:
        if self._feed is not None:
            self._feed.publish(SETTINGS_TOPIC)

    async def read(self, key: str = SETTINGS_KEY) -> SystemSettings | None:
        return await super().read(key)

    async def update(
        self, record: SystemSettings, *, expected_version: int | None = None
    ) -> SystemSettings:
        """Upsert the global record; any other key is forced to ``global``."""
        record.id = SETTINGS_KEY
        return await super().update(record, expected_version=expected_version)
