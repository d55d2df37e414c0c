"""
Global application state management (log buffer, scanner state and scan events).
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Any

logger = logging.getLogger("pet_diary")

# Global structural properties
SCAN_STATE = "idle"  # idle, running, paused, cancelled
scan_logs: deque[dict[str, str]] = deque(maxlen=200)

current_scan_total = 0
current_scan_processed = 0

scan_events: deque[dict[str, Any]] = deque(maxlen=500)
_event_seq = 0
_event_lock = threading.Lock()
_scan_lock = threading.Lock()

STARTED_AT = datetime.now()


def add_log(msg: str, level: int = logging.INFO) -> None:
    """Appends a new formatted log frame to the global historical log buffer."""
    timestamp = datetime.now().strftime("%I:%M:%S %p")
    scan_logs.appendleft({"time": timestamp, "message": msg})
    logger.log(level, msg)


def try_start_scan() -> bool:
    """Moves the scanner from idle to running. Returns False when a scan already holds it."""
    global SCAN_STATE
    with _scan_lock:
        if SCAN_STATE != "idle":
            return False
        SCAN_STATE = "running"
        return True


def push_scan_event(event_type: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Records a scanner event and stamps it with the next sequence number."""
    global _event_seq
    with _event_lock:
        _event_seq += 1
        event = {**payload, "type": event_type, "seq": _event_seq}
        scan_events.append(event)
    return event


def scan_events_since(seq: int) -> list[dict[str, Any]]:
    """Returns buffered events newer than ``seq`` in emission order."""
    return [e for e in list(scan_events) if e["seq"] > seq]


def reset_scan_progress() -> None:
    global SCAN_STATE, current_scan_total, current_scan_processed
    SCAN_STATE = "idle"
    current_scan_total = 0
    current_scan_processed = 0
