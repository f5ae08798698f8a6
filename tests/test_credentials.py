"""
Tests for CredentialPool rotation.
"""

from __future__ import annotations

import threading
from collections import Counter

from backend_sivic.providers.credentials import CredentialPool


def test_empty_pool():
    pool = CredentialPool([])
    assert not pool
    assert pool.next() is None
    assert pool.backups() == ()


def test_blank_keys_are_dropped():
    pool = CredentialPool(["a", " ", "", " b "])
    assert len(pool) == 2
    assert pool.backups() == ("b",)


def test_round_robin_order():
    pool = CredentialPool(["a", "b", "c"])
    assert [pool.next() for _ in range(7)] == ["a", "b", "c", "a", "b", "c", "a"]


def test_rotation_is_even_across_threads():
    """Concurrent callers share one counter: each key is used equally often."""
    pool = CredentialPool(["a", "b", "c", "d"])
    seen: list[str] = []
    lock = threading.Lock()

    def worker():
        for _ in range(250):
            key = pool.next()
            with lock:
                seen.append(key)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert Counter(seen) == {"a": 500, "b": 500, "c": 500, "d": 500}


def test_repr_hides_keys():
    assert repr(CredentialPool(["secret"])) == "CredentialPool(keys=1)"
