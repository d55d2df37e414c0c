"""
Multipart image upload handling shared by the photo and AI routers.
"""

import os
import uuid
from typing import Any

from fastapi import HTTPException, Request, UploadFile

import core.config as config


def base_url(request: Request) -> str:
    """Builds the public base URL from the request scheme and Host header, so LAN clients get reachable links."""
    host = request.headers.get("host") or f"localhost:{config.PORT}"
    return f"{request.url.scheme}://{host}"


async def save_upload(file: UploadFile | None, folder: str, request: Request) -> dict[str, Any]:
    """Validates an uploaded image and stores it as ``<UPLOAD_DIR>/<folder>/<uuid><ext>``.

    Raises:
        HTTPException: 400 for a missing file or unsupported type, 413 when larger than the limit.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No photo file received")

    mime_type = (file.content_type or "").lower()
    if mime_type not in config.ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Only JPEG/PNG/HEIC images are supported")

    content = await file.read()
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Photo exceeds the 10MB upload limit")

    target_dir = os.path.join(config.UPLOAD_DIR, folder)
    os.makedirs(target_dir, exist_ok=True)
    filename = f"{uuid.uuid4()}{os.path.splitext(file.filename)[1].lower()}"
    path = os.path.join(target_dir, filename)
    with open(path, "wb") as f:
        f.write(content)

    return {
        "filename": filename,
        "path": path,
        "url": f"{base_url(request)}/uploads/{folder}/{filename}",
        "size": len(content),
        "mimeType": mime_type,
    }
