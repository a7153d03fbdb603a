"""Per-job locks serializing concurrent mutations of the same job id."""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class JobLocks:
    """Registry of one lock per job id.

    Services that read-modify-write a job hold its lock for the whole cycle
    so two admin actions on the same job cannot overwrite each other's
    status or promotion window. Locks are process local and only exist
    while some caller holds or waits on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, job_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(job_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[job_id] = lock
            self._users[job_id] = self._users.get(job_id, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[job_id] -= 1
                if not self._users[job_id]:
                    del self._users[job_id]
                    del self._locks[job_id]
