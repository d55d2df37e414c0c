import base64
import io
import json
from dataclasses import dataclass, field
from typing import Any

import requests
from PIL import Image, ImageOps

import core.config as config

# Register HEIC/HEIF support with Pillow
try:
    from pillow_heif import register_heif_opener

    register_heif_opener()
except ImportError:
    pass  # pillow-heif not installed; HEIC files will fail gracefully


class ImageServiceError(Exception):
    """Base exception for errors originating from the image service module."""
    pass


PET_LABELS = ("Cat", "Dog")


@dataclass
class PetRecognitionResult:
    """Outcome of classifying a single asset for cats and dogs."""

    asset_id: str
    is_pet: bool
    animal_type: str | None = None
    confidence: float = 0.0
    bounding_box: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "isPet": self.is_pet,
            "animalType": self.animal_type or "",
            "confidence": self.confidence,
            "boundingBox": self.bounding_box,
        }


def _convert_gps_to_decimal(gps_coords: tuple[Any, ...], gps_ref: str) -> float | None:
    """Converts GPS coordinates from degrees/minutes/seconds to decimal.

    Args:
        gps_coords (tuple[Any, ...]): A tuple containing degrees, minutes, and
            seconds extracted from the EXIF data.
        gps_ref (str): The cardinal direction reference ('N', 'S', 'E', 'W').

    Returns:
        float | None: The computed decimal degree, or None if conversion fails.
    """
    try:
        d = float(gps_coords[0])
        m = float(gps_coords[1])
        s = float(gps_coords[2])
        decimal = d + (m / 60.0) + (s / 3600.0)
        if gps_ref in ["S", "W"]:
            decimal = -decimal
        return round(decimal, 6)
    except (TypeError, ValueError, IndexError, ZeroDivisionError):
        return None


def _read_gps(exif_data: Image.Exif) -> dict[str, float | None]:
    result: dict[str, float | None] = {"gps_lat": None, "gps_lon": None}
    gps_ifd = exif_data.get_ifd(0x8825)  # GPSInfo IFD
    if gps_ifd:
        gps_lat = gps_ifd.get(2)  # GPSLatitude
        gps_lat_ref = gps_ifd.get(1)  # GPSLatitudeRef (N/S)
        gps_lon = gps_ifd.get(4)  # GPSLongitude
        gps_lon_ref = gps_ifd.get(3)  # GPSLongitudeRef (E/W)
        if gps_lat and gps_lat_ref and gps_lon and gps_lon_ref:
            result["gps_lat"] = _convert_gps_to_decimal(gps_lat, gps_lat_ref)
            result["gps_lon"] = _convert_gps_to_decimal(gps_lon, gps_lon_ref)
    return result


def extract_gps_from_exif(filepath: str) -> dict[str, float | None]:
    """Extracts GPS latitude and longitude from a photo's EXIF data.

    Args:
        filepath (str): The absolute or relative path to the image file.

    Returns:
        dict[str, float | None]: A dictionary containing `gps_lat` and
            `gps_lon` keys mapped to their decimal float values or None.
    """
    try:
        with Image.open(filepath) as img:
            return _read_gps(img.getexif())
    except Exception:
        return {"gps_lat": None, "gps_lon": None}


def extract_asset_exif(filepath: str) -> dict[str, str | float | None]:
    """Extracts the capture date and GPS location of a library asset.

    Prefers DateTimeOriginal from the EXIF IFD and falls back to the
    top-level DateTime tag. Unreadable files yield all-None values.

    Args:
        filepath (str): The path to the image file to analyze.

    Returns:
        dict[str, str | float | None]: `date_taken`, `gps_lat` and `gps_lon`.
    """
    result: dict[str, str | float | None] = {"date_taken": None, "gps_lat": None, "gps_lon": None}
    try:
        with Image.open(filepath) as img:
            exif_data = img.getexif()
            if not exif_data:
                return result

            dt = exif_data.get_ifd(0x8769).get(36867)  # DateTimeOriginal
            if not dt:
                dt = exif_data.get(306)  # Tag 306 = DateTime
            if dt and str(dt).strip():
                result["date_taken"] = str(dt).strip()

            result.update(_read_gps(exif_data))
    except Exception:
        pass
    return result


def encode_image_to_base64(filepath: str) -> str:
    """Encode an image file to a base64 string.

    Args:
        filepath (str): The path to the image file to encode.

    Returns:
        str: The image file encoded as a base64 string.
    """
    with open(filepath, "rb") as image_file:
        return base64.b64encode(image_file.read()).decode("utf-8")


def load_image(filepath: str, max_size: int = 1024) -> Image.Image | None:
    """Loads an image reduced to fit a ``max_size`` square, honouring EXIF orientation.

    Returns:
        Image.Image | None: An RGB image, or None when the file cannot be decoded.
    """
    try:
        with Image.open(filepath) as img:
            img = ImageOps.exif_transpose(img)
            img.thumbnail((max_size, max_size))
            return img.convert("RGB")
    except Exception:
        return None


def image_to_jpeg_bytes(image: Image.Image, quality: int = 80) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def _best_pet(animals: list[dict[str, Any]]) -> dict[str, Any] | None:
    best = None
    for animal in animals:
        label = str(animal.get("label", "")).strip().title()
        if label not in PET_LABELS:
            continue
        try:
            confidence = float(animal.get("confidence", 0))
        except (TypeError, ValueError):
            confidence = 0.0
        if best is None or confidence > best["confidence"]:
            best = {"label": label, "confidence": confidence, "bounding_box": animal.get("bounding_box") or {}}
    return best


def recognize_pet_with_ollama(image: Image.Image, asset_id: str) -> PetRecognitionResult:
    """Asks the local Ollama vision model whether the image shows a cat or a dog.

    The model is instructed to answer with a JSON list of animals. The
    highest-confidence Cat or Dog wins; other animals count as no pet.

    Args:
        image (Image.Image): The decoded asset.
        asset_id (str): Opaque identifier of the asset.

    Returns:
        PetRecognitionResult: The classification outcome.

    Raises:
        ImageServiceError: If the request fails or the answer is not valid JSON.
    """
    prompt = (
        "List every animal visible in this photo. "
        'Answer strictly as JSON: {"animals": [{"label": "Cat|Dog|<other>", "confidence": 0.0-1.0, '
        '"bounding_box": {"x": 0-1, "y": 0-1, "width": 0-1, "height": 0-1}}]}. '
        'Use {"animals": []} when there are none.'
    )
    payload = {
        "model": config.ACTIVE_OLLAMA_MODEL,
        "prompt": prompt,
        "stream": False,
        "format": "json",
        "images": [base64.b64encode(image_to_jpeg_bytes(image)).decode("utf-8")],
    }

    try:
        response = requests.post(config.OLLAMA_URL, json=payload, timeout=60)
        response.raise_for_status()
        answer = json.loads(str(response.json().get("response", "")))
    except requests.RequestException as e:
        raise ImageServiceError(f"Ollama request failed for {asset_id}: {e}") from e
    except ValueError as e:
        raise ImageServiceError(f"Ollama returned malformed JSON for {asset_id}: {e}") from e

    animals = answer.get("animals", []) if isinstance(answer, dict) else []
    best = _best_pet(animals if isinstance(animals, list) else [])
    if best is None:
        return PetRecognitionResult(asset_id=asset_id, is_pet=False)
    return PetRecognitionResult(
        asset_id=asset_id,
        is_pet=True,
        animal_type=best["label"],
        confidence=best["confidence"],
        bounding_box=best["bounding_box"],
    )
