from __future__ import annotations

from typing import Optional, Protocol


class SettingsRepository(Protocol):
    """Generic key/value rows (``system_settings``)."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        """Upsert on key."""

        raise NotImplementedError
