import base64
import json

import pytest
import responses
from PIL import Image

from services.image_service import (
    ImageServiceError,
    _convert_gps_to_decimal,
    encode_image_to_base64,
    extract_asset_exif,
    extract_gps_from_exif,
    load_image,
    recognize_pet_with_ollama,
)

OLLAMA_URL = "http://localhost:11434/api/generate"


@pytest.mark.parametrize(
    "gps_coords, gps_ref, expected",
    [
        ((31.0, 13.0, 48.0), "N", 31.23),
        ((121.0, 28.0, 12.0), "E", 121.47),
        ((33.0, 51.0, 45.0), "S", -33.8625),
        ((0.0, 30.0, 0.0), "W", -0.5),
        (("bad", 0, 0), "N", None),
        ((1.0,), "N", None),
    ],
)
def test_convert_gps_to_decimal(gps_coords, gps_ref, expected):
    result = _convert_gps_to_decimal(gps_coords, gps_ref)
    if expected is None:
        assert result is None
    else:
        assert result == pytest.approx(expected, abs=1e-4)


def test_exif_helpers_tolerate_unreadable_files(tmp_path):
    missing = str(tmp_path / "missing.jpg")
    not_image = tmp_path / "notes.jpg"
    not_image.write_bytes(b"not an image at all")

    assert extract_gps_from_exif(missing) == {"gps_lat": None, "gps_lon": None}
    assert extract_asset_exif(str(not_image)) == {"date_taken": None, "gps_lat": None, "gps_lon": None}


def test_extract_asset_exif_reads_datetime(tmp_path):
    path = str(tmp_path / "dated.jpg")
    exif = Image.Exif()
    exif[306] = "2024:05:01 10:00:00"
    Image.new("RGB", (8, 8)).save(path, "JPEG", exif=exif)

    assert extract_asset_exif(path)["date_taken"] == "2024:05:01 10:00:00"


def test_load_image_shrinks_and_converts(tmp_path):
    path = str(tmp_path / "big.png")
    Image.new("RGBA", (2048, 1024)).save(path, "PNG")

    img = load_image(path, max_size=512)
    assert img.mode == "RGB"
    assert img.size == (512, 256)

    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"garbage")
    assert load_image(str(broken)) is None


def test_encode_image_to_base64(dummy_img):
    with open(dummy_img, "rb") as f:
        assert base64.b64decode(encode_image_to_base64(dummy_img)) == f.read()


@responses.activate
def test_recognize_pet_parses_best_animal(monkeypatch):
    monkeypatch.setattr("core.config.OLLAMA_URL", OLLAMA_URL)
    box = {"x": 0.1, "y": 0.2, "width": 0.5, "height": 0.5}
    answer = {"animals": [{"label": "bird", "confidence": 0.99}, {"label": "CAT", "confidence": "0.7", "bounding_box": box}]}
    responses.add(responses.POST, OLLAMA_URL, json={"response": json.dumps(answer)})

    result = recognize_pet_with_ollama(Image.new("RGB", (8, 8)), "a.jpg")

    assert result.to_dict() == {
        "assetId": "a.jpg",
        "isPet": True,
        "animalType": "Cat",
        "confidence": 0.7,
        "boundingBox": box,
    }
    body = json.loads(responses.calls[0].request.body)
    assert body["format"] == "json"
    assert len(body["images"]) == 1


@responses.activate
def test_recognize_pet_without_pets(monkeypatch):
    monkeypatch.setattr("core.config.OLLAMA_URL", OLLAMA_URL)
    responses.add(responses.POST, OLLAMA_URL, json={"response": '{"animals": []}'})

    result = recognize_pet_with_ollama(Image.new("RGB", (8, 8)), "a.jpg")
    assert result.is_pet is False
    assert result.to_dict()["animalType"] == ""


@pytest.mark.parametrize("kwargs", [{"status": 500, "json": {}}, {"status": 200, "json": {"response": "nope"}}])
@responses.activate
def test_recognize_pet_errors(monkeypatch, kwargs):
    monkeypatch.setattr("core.config.OLLAMA_URL", OLLAMA_URL)
    responses.add(responses.POST, OLLAMA_URL, **kwargs)

    with pytest.raises(ImageServiceError):
        recognize_pet_with_ollama(Image.new("RGB", (8, 8)), "a.jpg")
