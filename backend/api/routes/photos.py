"""
API router for photo uploads, photo records and serving the stored files.
"""

import os
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

import core.config as config
import core.state as state
from api.uploads import save_upload
from core.database import get_db
from core.store import JsonStore, new_id, utc_now

router = APIRouter()
files_router = APIRouter()


@router.post("/upload/profile-photo")
async def upload_profile_photo(request: Request, photo: UploadFile | None = File(None)) -> dict[str, Any]:
    """Stores a profile picture. Profile pictures are not recorded in the database."""
    saved = await save_upload(photo, "profiles", request)
    state.add_log(f"Profile photo uploaded: {saved['url']}")
    return {
        "success": True,
        "data": {
            "url": saved["url"],
            "thumbnailUrl": saved["url"],
            "fileSize": saved["size"],
            "mimeType": saved["mimeType"],
        },
    }


@router.post("/upload/photo")
async def upload_photo(
    request: Request,
    photo: UploadFile | None = File(None),
    pet_id: str | None = Form(None, alias="petId"),
    db: JsonStore = Depends(get_db),
) -> dict[str, Any]:
    """Stores a regular photo and records it; with ``petId`` the photo is also linked to that pet."""
    saved = await save_upload(photo, "photos", request)
    record = {
        "id": new_id(),
        "url": saved["url"],
        "localPath": saved["path"],
        "size": saved["size"],
        "mimeType": saved["mimeType"],
        "uploadedAt": utc_now(),
    }
    db.insert("photos", record)

    if pet_id:
        db.insert("pet_photos", {"id": new_id(), "petId": pet_id, "photoId": record["id"], "createdAt": utc_now()})

    state.add_log(f"Photo uploaded: {saved['url']}")
    return {"success": True, "data": record}


@router.get("/photos/{photo_id}")
async def get_photo(photo_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    photo = db.find("photos", photo_id)
    if not photo:
        raise HTTPException(status_code=404, detail="Photo not found")
    return {"success": True, "data": photo}


@files_router.get("/uploads/{folder}/{filename}", response_model=None)
async def get_upload(folder: str, filename: str) -> FileResponse:
    """Returns a stored upload or generated sticker."""
    if folder not in config.UPLOAD_FOLDERS or os.path.basename(filename) != filename:
        raise HTTPException(status_code=404, detail="File not found")

    filepath = os.path.join(config.UPLOAD_DIR, folder, filename)
    if not os.path.isfile(filepath):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(filepath)
