"""
Per-session serialization of mutations.

Submit, finish and abandon for the same session must not interleave. Within a
process a keyed ``threading.Lock`` orders them; across processes the row lock
taken by ``select_for_update()`` inside ``transaction.atomic()`` does.
Different sessions never wait on each other.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from django.db import transaction


class SessionLockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}
        self._holders: Dict[int, int] = {}

    @contextmanager
    def hold(self, session_id: int) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(session_id, threading.Lock())
            self._holders[session_id] = self._holders.get(session_id, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._holders[session_id] -= 1
                if not self._holders[session_id]:
                    # Nobody else is waiting, drop the entry
                    del self._holders[session_id]
                    del self._locks[session_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


_registry = SessionLockRegistry()


@contextmanager
def session_lock(session_id: int) -> Iterator[None]:
    """
    Serialize work on one session.

    Callers still need to load the row with ``select_for_update()`` inside the
    block; the surrounding ``transaction.atomic()`` is opened here.
    """
    with _registry.hold(session_id):
        with transaction.atomic():
            yield
