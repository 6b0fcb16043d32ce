from __future__ import annotations

import threading

from src.shift_payroll.shift_payroll.common.cache import ListCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ListCache(ttl_seconds=5, clock=clock)
    loads = []

    def loader():
        loads.append(1)
        return ["row"]

    assert cache.get_or_load("shifts", ("2024-05",), loader) == ["row"]
    assert cache.get_or_load("shifts", ("2024-05",), loader) == ["row"]
    assert len(loads) == 1

    clock.now = 5.0
    cache.get_or_load("shifts", ("2024-05",), loader)
    assert len(loads) == 2


def test_invalidate_by_namespace():
    cache = ListCache(ttl_seconds=60)
    cache.set("shifts", 1, "a")
    cache.set("staff", 1, "b")

    cache.invalidate("shifts")

    assert cache.get_or_load("shifts", 1, lambda: "fresh") == "fresh"
    assert cache.get_or_load("staff", 1, lambda: "fresh") == "b"


def test_zero_ttl_never_stores():
    cache = ListCache(ttl_seconds=0)
    calls = []
    cache.get_or_load("shifts", 1, lambda: calls.append(1))
    cache.get_or_load("shifts", 1, lambda: calls.append(1))
    assert len(calls) == 2


def test_invalidation_racing_an_expiry_read_does_not_raise():
    cache = ListCache(ttl_seconds=5)
    cache.set("shifts", "k", ["row"])

    def clock():
        # another request invalidates while this read is resolving
        cache.invalidate("shifts")
        return 10.0

    cache.clock = clock
    assert cache.get_or_load("shifts", "k", lambda: ["fresh"]) == ["fresh"]


def test_shared_between_threads():
    cache = ListCache(ttl_seconds=0.001)
    errors = []

    def reader():
        try:
            for i in range(2000):
                cache.get_or_load("shifts", i % 7, lambda: [i])
        except Exception as e:
            errors.append(e)

    def writer():
        try:
            for i in range(2000):
                cache.set("shifts", ("w", i % 11), [i])
                cache.invalidate("shifts")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=reader) for _ in range(3)] + [threading.Thread(target=writer) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
