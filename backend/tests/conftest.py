import os

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def mock_db_file(tmp_path, monkeypatch):
    """Points the JSON store, uploads, backups and scanner files at a fresh temp directory."""
    db_path = str(tmp_path / "db.json")
    uploads_dir = str(tmp_path / "uploads")
    backups_dir = str(tmp_path / "backups")
    os.makedirs(uploads_dir, exist_ok=True)

    monkeypatch.setattr("core.config.DB_FILE", db_path)
    monkeypatch.setattr("core.config.UPLOAD_DIR", uploads_dir)
    monkeypatch.setattr("core.config.BACKUPS_DIR", backups_dir)
    monkeypatch.setattr("core.config.PROCESSED_STORE_FILE", str(tmp_path / "processed_photos.json"))
    monkeypatch.setattr("core.config.PHOTO_LIBRARY_DIR", str(tmp_path / "library"))
    monkeypatch.setattr("core.config.SCAN_EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setattr("core.config.VERBOSE", False)

    from core.database import reset_store

    reset_store()
    yield db_path
    reset_store()


@pytest.fixture(autouse=True)
def reset_scan_state():
    import core.state as state

    state.reset_scan_progress()
    state.scan_events.clear()
    yield
    state.reset_scan_progress()


@pytest.fixture
def client(mock_db_file):
    """Provides a FastAPI test client, fully isolated."""
    # Import app here so patches apply
    from main import app

    return TestClient(app)


@pytest.fixture
def dummy_img(tmp_path):
    from PIL import Image

    img = Image.new("RGB", (10, 10), color="blue")
    file_path = str(tmp_path / "dummy.jpg")
    img.save(file_path, "JPEG")
    return file_path


@pytest.fixture
def image_bytes(dummy_img):
    with open(dummy_img, "rb") as f:
        return f.read()


@pytest.fixture
def ai_keys(monkeypatch):
    """Configures fake vendor credentials and endpoints."""
    monkeypatch.setattr("core.config.GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setattr("core.config.GEMINI_API_BASE_URL", "https://gemini.test/v1beta")
    monkeypatch.setattr("core.config.GEMINI_MODEL", "gemini-test")
    monkeypatch.setattr("core.config.GEMINI_IMAGE_MODEL", "gemini-image-test")
    monkeypatch.setattr("core.config.ARK_API_KEY", "test-ark-key")
    monkeypatch.setattr("core.config.ARK_API_BASE_URL", "https://ark.test/api/v3")
    monkeypatch.setattr("core.config.ARK_VISION_MODEL", "ark-vision-test")
    monkeypatch.setattr("core.config.ARK_IMAGE_MODEL", "seedream-test")
    monkeypatch.setattr("core.config.STICKER_PROVIDER", "gemini")
    return True


GEMINI_ANALYSIS_URL = "https://gemini.test/v1beta/models/gemini-test:generateContent"
GEMINI_IMAGE_URL = "https://gemini.test/v1beta/models/gemini-image-test:generateContent"
ARK_CHAT_URL = "https://ark.test/api/v3/chat/completions"
ARK_IMAGES_URL = "https://ark.test/api/v3/images/generations"

ANALYSIS_TEXT = (
    '```json\n{"analysis": {"emotion": "happy", "confidence": 0.92, "reasoning": "tail up"}, '
    '"pet_features": {"species": "cat", "breed": "British Shorthair", "primary_color": "grey", '
    '"markings": "white paws", "eye_color": "amber", "pose": "sitting"}}\n```'
)


def gemini_text_response(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def gemini_image_response(data="aGVsbG8=", mime_type="image/png"):
    return {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": mime_type, "data": data}}]}}]}


def ark_chat_response(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def mock_vendors(ai_keys):
    """Provides mocked Gemini and ARK endpoints answering successfully."""
    import responses

    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.POST, GEMINI_ANALYSIS_URL, json=gemini_text_response(ANALYSIS_TEXT), status=200)
        rsps.add(responses.POST, GEMINI_IMAGE_URL, json=gemini_image_response(), status=200)
        yield rsps


@pytest.fixture
def mock_ollama(monkeypatch):
    """Provides a mocked Ollama endpoint that sees a dog in every photo."""
    import responses

    monkeypatch.setattr("core.config.OLLAMA_URL", "http://localhost:11434/api/generate")

    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses.POST,
            "http://localhost:11434/api/generate",
            json={"response": '{"animals": [{"label": "dog", "confidence": 0.88}]}'},
            status=200,
        )
        yield rsps


@pytest.fixture
def photo_library(mock_db_file):
    """Creates the photo library directory and returns a helper that adds images to it."""
    import core.config as config
    from PIL import Image

    library = config.PHOTO_LIBRARY_DIR
    os.makedirs(library, exist_ok=True)

    def add(relpath, mtime=None, color="orange"):
        path = os.path.join(library, relpath)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        Image.new("RGB", (32, 32), color=color).save(path, "JPEG")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return add


class FakeTimer:
    instances = []

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def is_alive(self):
        return self.started and not self.cancelled


@pytest.fixture
def fake_timer(monkeypatch):
    """Replaces threading.Timer so background scans are never really armed."""
    import threading

    from services.background_scan import background_scan_manager

    FakeTimer.instances = []
    monkeypatch.setattr(threading, "Timer", FakeTimer)
    yield FakeTimer
    background_scan_manager.cancel()
