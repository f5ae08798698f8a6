"""
Round-robin pool of upstream API credentials.

One pool is created per application and shared by every request; next()
advances a single counter under a lock, so concurrent runs rotate through
the keys without skipping or repeating beyond the intended order.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterable


class CredentialPool:
    def __init__(self, keys: Iterable[str]) -> None:
        self._keys = tuple(k.strip() for k in keys if k and k.strip())
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def next(self) -> str | None:
        """Next key in rotation, or None when the pool is empty."""
        if not self._keys:
            return None
        with self._lock:
            index = next(self._counter)
        return self._keys[index % len(self._keys)]

    def backups(self) -> tuple[str, ...]:
        """All keys except the primary, in configured order."""
        return self._keys[1:]

    def __repr__(self) -> str:
        return f"CredentialPool(keys={len(self._keys)})"
