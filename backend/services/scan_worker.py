"""
Core photo-library scanner responsible for finding pet photos among unprocessed assets.
"""

import os
import time
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import core.config as config
import core.state as state
from services.image_service import (
    ImageServiceError,
    extract_asset_exif,
    image_to_jpeg_bytes,
    load_image,
    recognize_pet_with_ollama,
)
from services.processed_store import processed_store

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".heic"}


@dataclass
class LibraryAsset:
    asset_id: str
    filepath: str
    creation_date: datetime | None
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class PhotoScanResult:
    """A pet photo found by the scanner, exported as a JPEG for the app to pick up."""

    asset_id: str
    temp_file_path: str
    creation_date: datetime | None
    latitude: float | None
    longitude: float | None
    animal_type: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "assetId": self.asset_id,
            "tempFilePath": self.temp_file_path,
            "animalType": self.animal_type,
            "confidence": self.confidence,
        }
        if self.creation_date:
            result["creationDate"] = self.creation_date.isoformat()
        if self.latitude is not None and self.longitude is not None:
            result["latitude"] = self.latitude
            result["longitude"] = self.longitude
        return result


def has_permission() -> bool:
    """The scanner may only run when the photo library directory is present and readable."""
    library = config.PHOTO_LIBRARY_DIR
    return os.path.isdir(library) and os.access(library, os.R_OK)


def _creation_date(filepath: str, date_taken: str | None) -> datetime | None:
    if date_taken:
        try:
            return datetime.strptime(date_taken, "%Y:%m:%d %H:%M:%S")
        except ValueError:
            pass
    try:
        return datetime.fromtimestamp(os.path.getmtime(filepath))
    except OSError:
        return None


def fetch_assets(fetch_limit: int, since: datetime | None = None) -> list[LibraryAsset]:
    """Lists library images newest first.

    Args:
        fetch_limit (int): Maximum number of assets returned.
        since (datetime | None): Only include assets created strictly after this moment.

    Returns:
        list[LibraryAsset]: Assets ordered by creation date, descending.
    """
    library = config.PHOTO_LIBRARY_DIR
    assets = []
    for root, _, files in os.walk(library):
        for file in files:
            if os.path.splitext(file)[1].lower() not in IMAGE_EXTENSIONS:
                continue
            full_path = os.path.join(root, file)
            exif = extract_asset_exif(full_path)
            created = _creation_date(full_path, exif["date_taken"])
            if since and (created is None or created <= since):
                continue
            assets.append(
                LibraryAsset(
                    asset_id=os.path.relpath(full_path, library).replace(os.sep, "/"),
                    filepath=full_path,
                    creation_date=created,
                    latitude=exif["gps_lat"],
                    longitude=exif["gps_lon"],
                )
            )

    assets.sort(key=lambda a: a.creation_date or datetime.min, reverse=True)
    return assets[:fetch_limit]


def _export(image_bytes: bytes) -> str:
    os.makedirs(config.SCAN_EXPORT_DIR, exist_ok=True)
    path = os.path.join(config.SCAN_EXPORT_DIR, f"pet_{uuid.uuid4()}.jpg")
    with open(path, "wb") as f:
        f.write(image_bytes)
    return path


def _wait_while_paused(should_stop: Callable[[], bool] | None) -> None:
    while state.SCAN_STATE == "paused":
        if should_stop and should_stop():
            return
        time.sleep(0.5)


def iter_scan(
    limit: int = 30,
    since: datetime | None = None,
    should_stop: Callable[[], bool] | None = None,
    claimed: bool = False,
) -> Iterator[PhotoScanResult]:
    """Classifies unprocessed library assets and yields each pet photo as it is found.

    Every asset that is looked at is marked processed, whether it shows a pet,
    shows none, cannot be decoded or fails recognition, so it is never
    classified twice. The scan stops early when ``should_stop`` returns True
    or the scan is cancelled through the control endpoint.

    Args:
        limit (int): Maximum number of unprocessed assets to classify.
        since (datetime | None): Only consider assets created after this moment.
        should_stop (Callable[[], bool] | None): Polled before each asset.
        claimed (bool): The caller already moved the scanner out of idle with
            ``state.try_start_scan()``. Otherwise the scan claims it here and
            yields nothing when another scan holds it.

    Yields:
        PhotoScanResult: One entry per detected cat or dog.
    """
    if not claimed and not state.try_start_scan():
        state.add_log("Scan skipped: another scan is in progress")
        return

    if not has_permission():
        state.add_log("No permission to access photo library")
        state.reset_scan_progress()
        return

    found = 0
    try:
        processed = processed_store.processed_photo_ids
        unprocessed = [a for a in fetch_assets(limit * 3, since) if a.asset_id not in processed][:limit]
        state.add_log(f"Found {len(unprocessed)} unprocessed photos to scan")
        state.current_scan_total = len(unprocessed)
        state.current_scan_processed = 0

        for asset in unprocessed:
            _wait_while_paused(should_stop)
            if state.SCAN_STATE == "cancelled":
                state.add_log("Scan cancelled")
                break
            if should_stop and should_stop():
                state.add_log("Scan stopped before completion")
                break

            state.current_scan_processed += 1

            image = load_image(asset.filepath)
            if image is None:
                processed_store.mark_processed(asset.asset_id)
                continue

            try:
                recognition = recognize_pet_with_ollama(image, asset.asset_id)
            except ImageServiceError as e:
                state.add_log(f"Recognition failed for {asset.asset_id}: {e}")
                processed_store.mark_processed(asset.asset_id)
                continue

            state.add_log(
                f"Asset {asset.asset_id[:8]}... -> isPet={recognition.is_pet}, "
                f"type={recognition.animal_type}, confidence={recognition.confidence}"
            )
            processed_store.mark_processed(asset.asset_id)

            if not (recognition.is_pet and recognition.animal_type):
                continue

            try:
                temp_path = _export(image_to_jpeg_bytes(image, quality=80))
            except OSError as e:
                state.add_log(f"Failed to save temp file: {e}")
                continue

            found += 1
            state.add_log(f"Found pet: {recognition.animal_type} (confidence: {recognition.confidence})")
            yield PhotoScanResult(
                asset_id=asset.asset_id,
                temp_file_path=temp_path,
                creation_date=asset.creation_date,
                latitude=asset.latitude,
                longitude=asset.longitude,
                animal_type=recognition.animal_type,
                confidence=recognition.confidence,
            )
    finally:
        processed_store.update_last_scan_time()
        state.reset_scan_progress()
        state.add_log(f"Scan complete. Found {found} pet photos")


def scan_for_pets(
    limit: int = 30,
    since: datetime | None = None,
    on_result: Callable[[PhotoScanResult], None] | None = None,
    should_stop: Callable[[], bool] | None = None,
    claimed: bool = False,
) -> list[PhotoScanResult]:
    """Runs a full scan, invoking ``on_result`` for each pet photo as soon as it is found."""
    results = []
    for result in iter_scan(limit=limit, since=since, should_stop=should_stop, claimed=claimed):
        results.append(result)
        if on_result:
            on_result(result)
    return results


def reset_processed_photos() -> None:
    processed_store.clear_all()
    state.add_log("Cleared all processed photo records")
