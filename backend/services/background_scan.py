"""
Periodic background scanning of the photo library.

A run is armed with a timer and, once it fires, immediately arms the next
one before scanning. Each run has a time budget; when it expires the scan
stops after the asset in flight and the run is reported as unsuccessful.
"""

import threading
import time
from typing import Any

import core.config as config
import core.state as state
from services import scan_worker
from services.processed_store import processed_store


class BackgroundScanManager:
    """Schedules background scans and streams their results into the scan event buffer."""

    def __init__(self) -> None:
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def is_enabled(self) -> bool:
        return processed_store.is_background_enabled()

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def enable(self) -> bool:
        """Turns background scanning on. Refused when the photo library is inaccessible."""
        if not scan_worker.has_permission():
            state.add_log("Cannot enable background scan: no photo library permission")
            return False

        processed_store.set_background_enabled(True)
        self.schedule()
        state.add_log("Background scanning enabled")
        return True

    def disable(self) -> None:
        processed_store.set_background_enabled(False)
        self.cancel()
        state.add_log("Background scanning disabled")

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def schedule(self) -> None:
        """Arms the next run ``BACKGROUND_SCAN_INTERVAL`` seconds from now, replacing any pending one."""
        if not self.is_enabled:
            state.add_log("Not scheduling: background scan is disabled")
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(config.BACKGROUND_SCAN_INTERVAL, self.handle_background_task)
            self._timer.daemon = True
            self._timer.start()
        state.add_log(f"Scheduled background scan in {config.BACKGROUND_SCAN_INTERVAL} seconds")

    def handle_background_task(self) -> bool:
        """Executes one background run and returns whether it completed within its budget."""
        state.add_log("Background task started")
        self.schedule()

        if not state.try_start_scan():
            state.add_log("Background task skipped: a scan is already in progress")
            return False

        deadline = time.monotonic() + config.BACKGROUND_SCAN_BUDGET
        expired = False

        def should_stop() -> bool:
            nonlocal expired
            if time.monotonic() >= deadline:
                expired = True
            return expired

        results = self._run(config.BACKGROUND_SCAN_LIMIT, should_stop, claimed=True)
        if expired:
            state.add_log("Background task expired before completion")
            return False

        state.add_log(f"Background task completed. Found {len(results)} pets")
        return True

    def perform_manual_scan(self, limit: int | None = None, claimed: bool = False) -> list[dict[str, Any]]:
        """Scans right away; results are streamed as events and also returned together."""
        state.add_log("Manual scan started")
        return self._run(limit or config.MANUAL_SCAN_LIMIT, claimed=claimed)

    def _run(self, limit: int, should_stop=None, claimed: bool = False) -> list[dict[str, Any]]:
        results = scan_worker.scan_for_pets(
            limit=limit,
            on_result=lambda r: state.push_scan_event("scanResult", r.to_dict()),
            should_stop=should_stop,
            claimed=claimed,
        )
        state.push_scan_event("scanComplete", {"totalFound": len(results)})
        return [r.to_dict() for r in results]


background_scan_manager = BackgroundScanManager()
