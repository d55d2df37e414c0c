"""
API router logic for system-level operations: service info, statistics, logs and database snapshots.
"""

import os
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

import core.config as config
import core.state as state
from backup_db import backup_database
from core.database import get_db, reset_store
from core.store import JsonStore
from models.schemas import RestoreRequest
from restore_db import restore_database

router = APIRouter()
root_router = APIRouter()

ENDPOINTS = {
    "pets": {
        "POST /api/v1/pets/profile": "Sync a pet profile",
        "GET /api/v1/pets": "List pet profiles",
        "GET /api/v1/pets/:petId/profile": "Get a pet profile",
        "DELETE /api/v1/pets/:petId": "Delete a pet profile",
        "POST /api/v1/pets/:petId/photos": "Link a photo to a pet",
        "GET /api/v1/pets/:petId/photos": "List a pet's photos",
    },
    "photos": {
        "POST /api/v1/upload/profile-photo": "Upload a profile photo",
        "POST /api/v1/upload/photo": "Upload a photo",
        "GET /api/v1/photos/:photoId": "Get photo info",
    },
    "diaries": {
        "POST /api/v1/diaries": "Create or update a diary",
        "GET /api/v1/diaries": "List diaries",
        "GET /api/v1/diaries/:diaryId": "Get a diary",
        "DELETE /api/v1/diaries/:diaryId": "Delete a diary",
    },
    "emotions": {
        "POST /api/v1/emotion-records": "Record an emotion analysis",
        "GET /api/v1/emotion-records": "List emotion records",
        "GET /api/v1/emotion-records/:recordId": "Get an emotion record",
    },
    "ai": {
        "POST /api/v1/ai/emotion/analyze": "Analyze a pet's emotion",
        "POST /api/v1/ai/sticker/generate": "Generate a sticker from a photo",
        "POST /api/v1/ai/diary/generate": "Generate a diary from photos",
    },
    "scan": {
        "GET /api/v1/scan/status": "Scanner status",
        "POST /api/v1/scan/manual": "Scan the photo library now",
        "GET /api/v1/scan/stream": "Scan and stream results",
    },
    "stats": {
        "GET /api/v1/stats": "Server statistics",
    },
}


@root_router.get("/")
async def service_info() -> dict[str, Any]:
    return {"message": "Pet Diary Mock Server", "version": config.VERSION, "endpoints": ENDPOINTS}


@router.get("/stats")
async def get_stats(db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Returns collection sizes and process uptime in seconds."""
    return {
        "success": True,
        "data": {**db.counts(), "uptime": (datetime.now() - state.STARTED_AT).total_seconds()},
    }


@router.get("/version")
async def get_version() -> dict[str, str]:
    """Retrieves the active application version strictly."""
    return {"version": config.VERSION}


@router.get("/logs")
async def get_logs() -> dict[str, Any]:
    return {"success": True, "data": list(state.scan_logs)}


@router.get("/database/backups")
async def get_backups() -> dict[str, Any]:
    """Returns a list of available database backups, newest first."""
    if not os.path.exists(config.BACKUPS_DIR):
        return {"success": True, "data": {"backups": []}}

    backups = []
    for f in os.listdir(config.BACKUPS_DIR):
        if f.endswith(".json"):
            filepath = os.path.join(config.BACKUPS_DIR, f)
            backups.append({"filename": f, "size": os.path.getsize(filepath), "created": os.path.getmtime(filepath)})

    backups.sort(key=lambda x: x["created"], reverse=True)
    return {"success": True, "data": {"backups": backups}}


@router.post("/database/backup")
async def trigger_backup() -> dict[str, Any]:
    """Triggers an instantaneous synchronous backup copy of the JSON database."""
    if state.SCAN_STATE != "idle":
        raise HTTPException(status_code=400, detail="Cannot backup while a scan is running.")
    try:
        path = backup_database()
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Backup failed: {e}") from e
    if not path:
        raise HTTPException(status_code=404, detail="Database file not found")
    state.add_log(f"Database backed up to {path}")
    return {"success": True, "message": "Backup created successfully", "data": {"filename": os.path.basename(path)}}


@router.post("/database/restore")
async def trigger_restore(req: RestoreRequest) -> dict[str, Any]:
    """Restores the database from a snapshot and reloads it into memory."""
    if state.SCAN_STATE != "idle":
        raise HTTPException(status_code=400, detail="Cannot restore while a scan is running.")
    try:
        restored = restore_database(req.filename)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Restore failed: {e}") from e
    if not restored:
        raise HTTPException(status_code=404, detail=f"Backup {req.filename} not found")

    reset_store()
    state.add_log(f"Database restored from {req.filename}")
    return {"success": True, "message": "Database restored successfully"}


@router.post("/database/clean")
async def clean_database(db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Empties every collection of the JSON database."""
    db.reset()
    state.add_log("Database cleaned")
    return {"success": True, "message": "Database cleaned successfully"}
