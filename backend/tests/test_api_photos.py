import os


def test_upload_photo_records_and_serves_file(client, image_bytes, mock_db_file):
    resp = client.post("/api/v1/upload/photo", files={"photo": ("walk.jpg", image_bytes, "image/jpeg")})
    assert resp.status_code == 200
    record = resp.json()["data"]

    assert record["url"].startswith("http://testserver/uploads/photos/")
    assert record["url"].endswith(".jpg")
    assert record["size"] == len(image_bytes)
    assert record["mimeType"] == "image/jpeg"
    assert os.path.exists(record["localPath"])

    fetched = client.get(f"/api/v1/photos/{record['id']}")
    assert fetched.json()["data"] == record

    served = client.get(record["url"].replace("http://testserver", ""))
    assert served.status_code == 200
    assert served.content == image_bytes


def test_upload_photo_with_pet_links_it(client, image_bytes):
    resp = client.post(
        "/api/v1/upload/photo",
        files={"photo": ("walk.png", image_bytes, "image/png")},
        data={"petId": "pet-9"},
    )
    photo_id = resp.json()["data"]["id"]

    links = client.get("/api/v1/pets/pet-9/photos").json()["data"]
    assert [link["photoId"] for link in links] == [photo_id]


def test_profile_photo_is_not_recorded(client, image_bytes):
    resp = client.post("/api/v1/upload/profile-photo", files={"photo": ("me.jpg", image_bytes, "image/jpeg")})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert "/uploads/profiles/" in data["url"]
    assert data["thumbnailUrl"] == data["url"]
    assert data["fileSize"] == len(image_bytes)

    assert client.get("/api/v1/stats").json()["data"]["photos"] == 0


def test_upload_without_file_is_rejected(client):
    resp = client.post("/api/v1/upload/photo")
    assert resp.status_code == 400
    assert resp.json()["message"] == "No photo file received"


def test_upload_rejects_non_images(client):
    resp = client.post("/api/v1/upload/photo", files={"photo": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400
    assert "JPEG/PNG/HEIC" in resp.json()["message"]


def test_upload_rejects_oversized_files(client, monkeypatch):
    monkeypatch.setattr("core.config.MAX_UPLOAD_BYTES", 10)
    resp = client.post("/api/v1/upload/photo", files={"photo": ("big.jpg", b"x" * 11, "image/jpeg")})
    assert resp.status_code == 413


def test_unknown_photo_and_file(client):
    assert client.get("/api/v1/photos/missing").status_code == 404
    assert client.get("/uploads/photos/missing.jpg").status_code == 404
    assert client.get("/uploads/secrets/db.json").status_code == 404
