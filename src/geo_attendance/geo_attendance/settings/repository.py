from __future__ import annotations

from typing import Optional, Protocol


class SettingsRepository(Protocol):
    """Device key-value store."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
