"""
Flat JSON document store backing the mock REST API.

The whole database lives in memory as one dict of collections and every
mutation rewrites the complete file. There are no indexes or foreign key
checks; lookups are linear scans over the collection lists.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("pet_diary.store")

COLLECTIONS = ("pets", "photos", "pet_photos", "diaries", "emotion_records")


def new_id() -> str:
    """Returns a fresh UUIDv4 string identifier."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Returns the current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def empty_document() -> dict[str, list[dict[str, Any]]]:
    return {name: [] for name in COLLECTIONS}


class JsonStore:
    """In-memory collections persisted to a single JSON file.

    Args:
        path (str): Location of the JSON file. It is created on the first save.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.data = empty_document()

    def load(self) -> None:
        """Reads the document from disk.

        A missing file leaves the store empty. A corrupt file is logged and
        ignored, so the next write replaces it. Collections absent from the
        file are added as empty lists.
        """
        if not os.path.exists(self.path):
            self.data = empty_document()
            return

        try:
            with open(self.path, encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load database %s: %s", self.path, e)
            self.data = empty_document()
            return

        if not isinstance(loaded, dict):
            logger.error("Database %s is not a JSON object, starting empty", self.path)
            self.data = empty_document()
            return

        for name in COLLECTIONS:
            if not isinstance(loaded.get(name), list):
                loaded[name] = []
        self.data = loaded
        logger.debug("Database loaded from %s", self.path)

    def save(self) -> None:
        """Serializes the entire document to disk in one blocking write."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)

    def _collection(self, name: str) -> list[dict[str, Any]]:
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        return self.data[name]

    def all(self, collection: str) -> list[dict[str, Any]]:
        return list(self._collection(collection))

    def find(self, collection: str, record_id: str) -> dict[str, Any] | None:
        for record in self._collection(collection):
            if record.get("id") == record_id:
                return record
        return None

    def find_index(self, collection: str, record_id: str) -> int:
        for i, record in enumerate(self._collection(collection)):
            if record.get("id") == record_id:
                return i
        return -1

    def filter(self, collection: str, **equals: Any) -> list[dict[str, Any]]:
        """Returns records whose fields equal every given keyword value."""
        return [
            record
            for record in self._collection(collection)
            if all(record.get(key) == value for key, value in equals.items())
        ]

    def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        self._collection(collection).append(record)
        self.save()
        return record

    def upsert(self, collection: str, record: dict[str, Any]) -> tuple[dict[str, Any], bool]:
        """Replaces the record sharing ``record['id']`` or appends a new one.

        Returns:
            tuple[dict[str, Any], bool]: The stored record and whether it was created.
        """
        items = self._collection(collection)
        index = self.find_index(collection, record.get("id"))
        if index >= 0:
            items[index] = record
            created = False
        else:
            items.append(record)
            created = True
        self.save()
        return record, created

    def delete(self, collection: str, record_id: str) -> dict[str, Any] | None:
        items = self._collection(collection)
        index = self.find_index(collection, record_id)
        if index < 0:
            return None
        removed = items.pop(index)
        self.save()
        return removed

    def counts(self) -> dict[str, int]:
        return {name: len(self.data[name]) for name in COLLECTIONS}

    def reset(self) -> None:
        """Empties every collection and persists the blank document."""
        self.data = empty_document()
        self.save()
