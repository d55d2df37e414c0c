"""
API router for emotion records.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from core.database import get_db
from core.store import JsonStore, new_id, utc_now
from models.schemas import EmotionRecordRequest

router = APIRouter()


@router.post("/emotion-records")
async def create_emotion_record(req: EmotionRecordRequest, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    record = {**req.as_record(), "id": new_id(), "createdAt": utc_now()}
    db.insert("emotion_records", record)
    return {"success": True, "data": record}


@router.get("/emotion-records")
async def list_emotion_records(
    pet_id: str | None = Query(None, alias="petId"), db: JsonStore = Depends(get_db)
) -> dict[str, Any]:
    """Lists emotion records newest first, optionally for one pet."""
    records = db.filter("emotion_records", petId=pet_id) if pet_id else db.all("emotion_records")
    records.sort(key=lambda r: str(r.get("createdAt", "")), reverse=True)
    return {"success": True, "data": records}


@router.get("/emotion-records/{record_id}")
async def get_emotion_record(record_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    record = db.find("emotion_records", record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Emotion record not found")
    return {"success": True, "data": record}
