"""
Concurrency Control Service for the Mastermind lobby

Hands out fine-grained per-key locks so that operations on one game never
wait on operations on another.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class ConcurrencyControlService:
    """Manages per-key reentrant locks."""

    def __init__(self):
        # Per-key locks for fine-grained control
        self._key_locks: Dict[str, threading.RLock] = {}
        # Lock for managing the key locks themselves
        self._locks_lock = threading.Lock()

    def get_lock(self, key: str) -> threading.RLock:
        """Get or create the lock for a key."""
        with self._locks_lock:
            if key not in self._key_locks:
                self._key_locks[key] = threading.RLock()
            return self._key_locks[key]

    def cleanup_lock(self, key: str):
        """Drop the lock for a key whose entity was deleted."""
        with self._locks_lock:
            self._key_locks.pop(key, None)

    @contextmanager
    def key_operation(self, key: str):
        """Context manager serialising operations on one key."""
        with self.get_lock(key):
            yield

    def lock_count(self) -> int:
        with self._locks_lock:
            return len(self._key_locks)
