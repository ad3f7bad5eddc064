"""Per-name mutual exclusion for check-then-act sequences."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class _Slot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class NameLockTable:
    """Serializes work on a single name while leaving other names independent.

    The table lock only guards creation and removal of slots; the slot lock is
    what callers wait on. Slots are dropped once nobody holds or waits on them,
    so the table does not grow with the number of names ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        """Hold the exclusive section for ``name``."""
        with self._guard:
            slot = self._slots.setdefault(name, _Slot())
            slot.holders += 1

        slot.lock.acquire()
        try:
            yield
        finally:
            slot.lock.release()
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._slots[name]

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)
