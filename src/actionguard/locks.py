"""Per-path locks for read-modify-write operations.

Worker threads that mutate the same workflow file must not interleave reads
and writes on it. A FileLockRegistry hands out one lock per path; the
application builds one registry at startup and passes it to every component
that writes files.

Only protects within a single process. Keys are lexically cleaned but not
symlink-resolved, so two spellings that alias the same inode through a link
get independent locks. Entries are never evicted.
"""
from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Callable, TypeVar

T = TypeVar("T")


def _key(path: str | os.PathLike[str]) -> str:
    return os.path.normpath(os.fspath(path))


class FileLockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def get_lock(self, path: str | os.PathLike[str]) -> threading.Lock:
        """Return the lock for *path*, creating it if needed."""
        key = _key(path)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def lock_file(self, path: str | os.PathLike[str]) -> None:
        self.get_lock(path).acquire()

    def unlock_file(self, path: str | os.PathLike[str]) -> None:
        """Release the lock for *path*. Raises RuntimeError if it is not held."""
        self.get_lock(path).release()

    @contextmanager
    def locked(self, path: str | os.PathLike[str]) -> Iterator[None]:
        with self.get_lock(path):
            yield

    def with_file_lock(self, path: str | os.PathLike[str], fn: Callable[..., T], *args, **kwargs) -> T:
        """Run fn(*args, **kwargs) holding the lock for *path* and return its result.

        The lock is released whether fn returns or raises.
        """
        with self.get_lock(path):
            return fn(*args, **kwargs)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        with self._guard:
            return _key(path) in self._locks

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
