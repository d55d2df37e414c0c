"""
API router for diary entries.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

import core.config as config
import core.state as state
from core.database import get_db
from core.store import JsonStore, new_id, utc_now
from models.schemas import DiaryRequest

router = APIRouter()


def _date_key(diary: dict[str, Any]) -> tuple[int, float]:
    """Sort key placing parseable dates newest first and the rest at the end."""
    value = diary.get("date")
    if isinstance(value, str):
        try:
            return (1, datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
        except ValueError:
            pass
    return (0, 0.0)


def build_diary(req: DiaryRequest) -> dict[str, Any]:
    now = utc_now()
    return {
        "id": req.id or new_id(),
        "petId": req.petId,
        "date": req.date,
        "content": req.content,
        "imagePath": req.imagePath,
        "isLocked": req.isLocked,
        "emotionRecordId": req.emotionRecordId,
        "photoIds": req.photoIds,
        "createdAt": req.createdAt or now,
        "syncedAt": now,
    }


@router.post("/diaries")
async def save_diary(req: DiaryRequest, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Creates a diary entry or replaces the one sharing its ``id``."""
    if config.VERBOSE:
        state.add_log(f"Diary save request: {req.model_dump()}")

    diary, created = db.upsert("diaries", build_diary(req))
    state.add_log(f"{'Created' if created else 'Updated'} diary {diary['id']}")
    return {"success": True, "data": diary}


@router.get("/diaries")
async def list_diaries(
    pet_id: str | None = Query(None, alias="petId"),
    limit: int = Query(30, ge=0),
    offset: int = Query(0, ge=0),
    db: JsonStore = Depends(get_db),
) -> dict[str, Any]:
    """Lists diaries newest date first, optionally for one pet, one page at a time."""
    diaries = db.filter("diaries", petId=pet_id) if pet_id else db.all("diaries")
    diaries.sort(key=_date_key, reverse=True)

    return {
        "success": True,
        "data": {
            "diaries": diaries[offset : offset + limit],
            "total": len(diaries),
            "limit": limit,
            "offset": offset,
        },
    }


@router.get("/diaries/{diary_id}")
async def get_diary(diary_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    diary = db.find("diaries", diary_id)
    if not diary:
        raise HTTPException(status_code=404, detail="Diary not found")
    return {"success": True, "data": diary}


@router.delete("/diaries/{diary_id}")
async def delete_diary(diary_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    if not db.delete("diaries", diary_id):
        raise HTTPException(status_code=404, detail="Diary not found")
    return {"success": True, "data": {"diaryId": diary_id}}
