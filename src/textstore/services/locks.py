"""Per-address mutual exclusion for in-process callers.

The database serializes writers across processes; these locks make concurrent
requests inside one process wait for each other instead of racing to the
database and failing on conflict.

Callers that hold more than one address must always take the global counter
before any record address.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from threading import Lock, RLock


class _AddressLock:
    """A lock plus the number of callers holding or waiting on it."""

    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = RLock()
        self.holders = 0


_REGISTRY_LOCK = Lock()
# Entries live only while some caller holds or waits on the address.
_ADDRESS_LOCKS: dict[bytes, _AddressLock] = {}


@contextmanager
def _hold(address: bytes) -> Iterator[None]:
    with _REGISTRY_LOCK:
        entry = _ADDRESS_LOCKS.get(address)
        if entry is None:
            entry = _ADDRESS_LOCKS[address] = _AddressLock()
        entry.holders += 1
    try:
        with entry.lock:
            yield
    finally:
        with _REGISTRY_LOCK:
            entry.holders -= 1
            if entry.holders == 0:
                del _ADDRESS_LOCKS[address]


@contextmanager
def hold_addresses(*addresses: bytes) -> Iterator[None]:
    """Hold the locks of every address, in the given order, for the block."""
    with ExitStack() as stack:
        for address in dict.fromkeys(addresses):
            stack.enter_context(_hold(address))
        yield
