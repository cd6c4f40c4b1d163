"""
RFID Scan Adapter — feeds reader events into the movement engine.

The reader driver only has to deliver tag strings (one per line).
This adapter adds what the engine deliberately leaves out:

- the scanner operator id (NOWSTOCK['SCANNER_ACTOR_ID'])
- debouncing of repeated reads of the same tag
- retry with backoff of retryable StorageFaults

Usage:
    adapter = ScanAdapter()
    outcome = adapter.on_tag_read(tenant_id, "E2000017221101441890")

    with open('/dev/ttyUSB0') as reader:
        for outcome in adapter.consume(tenant_id, reader):
            ...
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator

from django.core.exceptions import ImproperlyConfigured
from django.db import close_old_connections

from nowstock.conf import nowstock_settings
from nowstock.exceptions import StorageFault
from nowstock.services.engine import MovementEngine, MovementOutcome

logger = logging.getLogger('nowstock')


class ScanAdapter:
    """
    Hardware-facing entry point for tag reads.

    Args:
        engine: MovementEngine (None = default engine)
        actor_id: User recorded on scans (None = SCANNER_ACTOR_ID)
        debounce_seconds: Window for dropping repeated reads
        retry_attempts: Total attempts on retryable StorageFault
        backoff_seconds: First retry delay, doubled on each attempt
        clock / sleep: Injectable for tests
    """

    def __init__(self, engine: MovementEngine | None = None, actor_id=None,
                 debounce_seconds: float | None = None,
                 retry_attempts: int | None = None,
                 backoff_seconds: float | None = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.engine = engine or MovementEngine()
        self.actor_id = actor_id if actor_id is not None else nowstock_settings.SCANNER_ACTOR_ID
        if self.actor_id is None:
            raise ImproperlyConfigured(
                "NOWSTOCK['SCANNER_ACTOR_ID'] must be configured for the RFID reader."
            )
        self.debounce_seconds = (
            nowstock_settings.SCAN_DEBOUNCE_SECONDS
            if debounce_seconds is None else debounce_seconds
        )
        self.retry_attempts = max(1, (
            nowstock_settings.STORAGE_RETRY_ATTEMPTS
            if retry_attempts is None else retry_attempts
        ))
        self.backoff_seconds = (
            nowstock_settings.STORAGE_RETRY_BACKOFF_SECONDS
            if backoff_seconds is None else backoff_seconds
        )
        self._clock = clock
        self._sleep = sleep
        self._last_seen: dict[tuple[int, str], float] = {}
        self._seen_lock = threading.Lock()

    def on_tag_read(self, tenant_id: int, rfid_tag: str, actor_id=None) -> MovementOutcome | None:
        """
        Handle one read event.

        Returns:
            MovementOutcome, or None when the read was a duplicate
            inside the debounce window (or blank)

        Raises:
            StorageFault: Non-retryable, or retries exhausted
        """
        tag = (rfid_tag or '').strip()
        if not tag:
            return None
        if self._is_duplicate(tenant_id, tag):
            logger.debug("scan.debounced", extra={"tenant_id": tenant_id, "rfid_tag": tag})
            return None

        actor = actor_id if actor_id is not None else self.actor_id
        delay = self.backoff_seconds
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return self.engine.record_scan(tenant_id, tag, actor)
            except StorageFault as exc:
                if not exc.retryable or attempt == self.retry_attempts:
                    # Nothing was recorded: the next read of this tag must go through
                    self._forget(tenant_id, tag)
                    raise
                logger.warning(
                    "scan.retry",
                    extra={"tenant_id": tenant_id, "rfid_tag": tag, "attempt": attempt},
                )
                self._sleep(delay)
                delay *= 2
        return None

    def consume(self, tenant_id: int, lines: Iterable[str]) -> Iterator[tuple[str, MovementOutcome]]:
        """
        Feed a line-oriented reader stream.

        Database connections are released after every event, like
        Django does at the end of a request.

        Yields:
            (tag, outcome) for every read that was not debounced
        """
        for line in lines:
            tag = line.strip()
            if not tag:
                continue
            close_old_connections()
            try:
                outcome = self.on_tag_read(tenant_id, tag)
            finally:
                close_old_connections()
            if outcome is not None:
                yield tag, outcome

    def _is_duplicate(self, tenant_id: int, tag: str) -> bool:
        """
        Record the read and tell whether it falls inside the window.

        _last_seen is kept in read order, so expired entries are always
        at the front and are dropped before the lookup.
        """
        now = self._clock()
        key = (tenant_id, tag)
        with self._seen_lock:
            while self._last_seen:
                oldest, seen_at = next(iter(self._last_seen.items()))
                if now - seen_at < self.debounce_seconds:
                    break
                del self._last_seen[oldest]
            last = self._last_seen.pop(key, None)
            self._last_seen[key] = now
        return last is not None

    def _forget(self, tenant_id: int, tag: str) -> None:
        with self._seen_lock:
            self._last_seen.pop((tenant_id, tag), None)
