"""
Reference-counted connection registry.

One entry per pool key (the URL, or ``host:port/db@user`` for configs built
from discrete fields). Entries whose reference count dropped to zero are
closed by :meth:`PoolManager.sweep` once idle for longer than the timeout.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from ..utils import get_logger
from .base import ConnectionConfig, DatabaseDriver, DriverError

T = TypeVar("T")

IDLE_TIMEOUT_SECONDS = 30.0


@dataclass
class PoolEntry:
    key: str
    driver: DatabaseDriver
    refcount: int = 0
    last_used: float = 0.0
    # held while a caller runs against the connection
    guard: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)


class PoolManager:
    def __init__(
        self,
        factory: Callable[[ConnectionConfig], DatabaseDriver],
        *,
        idle_timeout: float = IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._entries: Dict[str, PoolEntry] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("drivers.pool")

    def acquire(self, config: ConnectionConfig) -> DatabaseDriver:
        return self._acquire_entry(config).driver

    def _acquire_entry(self, config: ConnectionConfig) -> PoolEntry:
        key = config.pool_key()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                driver = self._factory(config)
                driver.connect(config)
                entry = PoolEntry(key, driver)
                self._entries[key] = entry
                self.logger.debug("Opened pool entry for %s", config.descriptive_label())
            entry.refcount += 1
            entry.last_used = self._clock()
            return entry

    def release(self, config: ConnectionConfig) -> None:
        key = config.pool_key()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return
            entry.refcount = max(0, entry.refcount - 1)
            entry.last_used = self._clock()

    def refcount(self, config: ConnectionConfig) -> int:
        entry = self._entries.get(config.pool_key())
        return entry.refcount if entry else 0

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Close idle entries; returns how many were dropped.
        """

        current = self._clock() if now is None else now
        with self._lock:
            idle = [
                entry
                for entry in self._entries.values()
                if entry.refcount == 0 and current - entry.last_used > self.idle_timeout
            ]
            for entry in idle:
                del self._entries[entry.key]
        for entry in idle:
            self._close(entry)
        return len(idle)

    def close_all(self) -> None:
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in entries:
            self._close(entry)

    def with_client(self, config: ConnectionConfig, fn: Callable[[DatabaseDriver], T]) -> T:
        """
        Run ``fn`` with exclusive use of the pooled connection. Other callers
        sharing the key wait until ``fn`` returns.
        """

        entry = self._acquire_entry(config)
        try:
            with entry.guard:
                return fn(entry.driver)
        finally:
            self.release(config)

    def with_transaction(self, config: ConnectionConfig, fn: Callable[[DatabaseDriver], T]) -> T:
        entry = self._acquire_entry(config)
        driver = entry.driver
        try:
            with entry.guard:
                driver.begin()
                try:
                    result = fn(driver)
                    driver.commit()
                except BaseException:
                    driver.rollback()
                    raise
                return result
        finally:
            self.release(config)

    def _close(self, entry: PoolEntry) -> None:
        try:
            entry.driver.close()
        except DriverError as exc:
            self.logger.warning("Failed to close pool entry %s: %s", entry.key, exc)
        self.logger.debug("Closed pool entry %s", entry.key)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, config: Any) -> bool:
        key = config.pool_key() if isinstance(config, ConnectionConfig) else config
        return key in self._entries
