"""
Key-value store protocol for type hints.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol


class KeyValueStore(Protocol):
    async def get_str(self, key: str) -> Optional[str]:
        ...

    async def set_str(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def get_json(self, key: str) -> Optional[Any]:
        ...

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ...

    async def close(self) -> None:
        ...
