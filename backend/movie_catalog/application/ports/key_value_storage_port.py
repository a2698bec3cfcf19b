from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStoragePort(Protocol):
    """Client-scoped string store (the local-storage contract).

    Implementations raise PersistenceError on read/write failures.
    """

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...
