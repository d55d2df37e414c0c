"""
Persistent record of photo-library assets the scanner has already classified.
"""

import json
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any

import core.config as config

logger = logging.getLogger("pet_diary.processed_store")

# Guards read-modify-write cycles on the store file
_lock = threading.Lock()


class ProcessedPhotosStore:
    """Keeps processed asset IDs, the last scan time and the background-scan flag in a JSON file."""

    def __init__(self, path: str | None = None) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path or config.PROCESSED_STORE_FILE

    def _read(self) -> dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning("Unreadable processed store %s: %s", self.path, e)
            return {}

    def _write(self, data: dict[str, Any]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @property
    def processed_photo_ids(self) -> set[str]:
        return set(self._read().get("processedPhotoIds", []))

    def is_processed(self, asset_id: str) -> bool:
        return asset_id in self.processed_photo_ids

    def mark_processed(self, *asset_ids: str) -> None:
        with _lock:
            data = self._read()
            ids = set(data.get("processedPhotoIds", []))
            ids.update(asset_ids)
            data["processedPhotoIds"] = sorted(ids)
            self._write(data)

    def clear_all(self) -> None:
        """Forgets every processed asset. The last scan time and flags are kept."""
        with _lock:
            data = self._read()
            data.pop("processedPhotoIds", None)
            self._write(data)

    @property
    def last_scan_time(self) -> datetime | None:
        value = self._read().get("lastScanTime")
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None

    def update_last_scan_time(self) -> None:
        with _lock:
            data = self._read()
            data["lastScanTime"] = datetime.now(timezone.utc).isoformat()
            self._write(data)

    def is_background_enabled(self) -> bool:
        return bool(self._read().get("backgroundScanEnabled", False))

    def set_background_enabled(self, enabled: bool) -> None:
        with _lock:
            data = self._read()
            data["backgroundScanEnabled"] = enabled
            self._write(data)


processed_store = ProcessedPhotosStore()
