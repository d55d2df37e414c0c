"""
API router exposing the AI features: emotion analysis, sticker pipeline and diary generation.

Vendor calls are blocking HTTP requests, so they run in the threadpool.
"""

import json
from datetime import date as date_type
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool

import core.state as state
from api.routes.diaries import build_diary
from api.uploads import base_url, save_upload
from core.database import get_db
from core.store import JsonStore, new_id, utc_now
from models.schemas import DiaryRequest
from services.ai.common import AIServiceError
from services.ai.diary_generator import generate_diary
from services.ai.emotion_analyzer import analyze_emotion
from services.ai.pipeline import generate_sticker_pipeline

router = APIRouter()


def _ai_error(e: AIServiceError) -> HTTPException:
    state.add_log(f"AI request failed: {e}")
    return HTTPException(status_code=502, detail=str(e))


def _parse_json_field(value: str | None, name: str, expected: type) -> Any:
    if value is None or value == "":
        return None
    try:
        parsed = json.loads(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"{name} must be valid JSON") from e
    if not isinstance(parsed, expected):
        raise HTTPException(status_code=400, detail=f"{name} must be a JSON {expected.__name__}")
    return parsed


def _record_photo(db: JsonStore, saved: dict[str, Any], pet_id: str | None) -> dict[str, Any]:
    photo = {
        "id": new_id(),
        "url": saved["url"],
        "localPath": saved["path"],
        "size": saved["size"],
        "mimeType": saved["mimeType"],
        "uploadedAt": utc_now(),
    }
    db.insert("photos", photo)
    if pet_id:
        db.insert("pet_photos", {"id": new_id(), "petId": pet_id, "photoId": photo["id"], "createdAt": utc_now()})
    return photo


@router.post("/ai/emotion/analyze")
async def analyze_photo_emotion(request: Request, image: UploadFile | None = File(None)) -> dict[str, Any]:
    """Runs only the emotion and feature analysis step on an uploaded photo."""
    saved = await save_upload(image, "photos", request)
    try:
        result = await run_in_threadpool(analyze_emotion, saved["path"])
    except AIServiceError as e:
        raise _ai_error(e) from e
    return {"success": True, "data": result}


@router.post("/ai/sticker/generate")
async def generate_sticker(
    request: Request,
    image: UploadFile | None = File(None),
    pet_id: str | None = Form(None, alias="petId"),
    db: JsonStore = Depends(get_db),
) -> dict[str, Any]:
    """Turns a pet photo into a sticker and records the detected emotion."""
    saved = await save_upload(image, "photos", request)
    photo = _record_photo(db, saved, pet_id)

    try:
        result = await run_in_threadpool(generate_sticker_pipeline, saved["path"], base_url(request), saved["url"])
    except AIServiceError as e:
        raise _ai_error(e) from e

    analysis = result.get("analysis") or {}
    record = {
        "id": new_id(),
        "petId": pet_id,
        "photoId": photo["id"],
        "emotion": analysis.get("emotion"),
        "confidence": analysis.get("confidence"),
        "reasoning": analysis.get("reasoning"),
        "petFeatures": result.get("pet_features"),
        "stickerUrl": result["sticker"]["imageUrl"],
        "stickerFallback": result["sticker"]["fallback"],
        "createdAt": utc_now(),
    }
    db.insert("emotion_records", record)
    state.add_log(f"Sticker pipeline finished for photo {photo['id']} (emotion: {record['emotion']})")

    return {"success": True, "data": {**result, "photoId": photo["id"], "emotionRecordId": record["id"]}}


@router.post("/ai/diary/generate")
async def generate_pet_diary(
    request: Request,
    images: list[UploadFile] | None = File(None),
    pet: str | None = Form(None),
    pet_id: str | None = Form(None, alias="petId"),
    date: str | None = Form(None),
    other_pets: str | None = Form(None, alias="otherPets"),
    save: bool = Form(False),
    db: JsonStore = Depends(get_db),
) -> dict[str, Any]:
    """Writes a diary entry in the pet's voice from the uploaded photos.

    The pet comes from the ``pet`` JSON field or is looked up by ``petId``.
    Without ``otherPets`` the stored pets sharing the pet's ``ownerId`` are used;
    a pet without an owner gets no siblings.
    """
    if not images:
        raise HTTPException(status_code=400, detail="At least one photo is required")

    pet_info = _parse_json_field(pet, "pet", dict)
    if pet_info is None:
        if not pet_id:
            raise HTTPException(status_code=400, detail="pet or petId is required")
        pet_info = db.find("pets", pet_id)
        if not pet_info:
            raise HTTPException(status_code=404, detail="Pet profile not found")

    siblings = _parse_json_field(other_pets, "otherPets", list)
    if siblings is None:
        owner_id = pet_info.get("ownerId")
        siblings = (
            [p for p in db.all("pets") if p.get("ownerId") == owner_id and p.get("id") != pet_info.get("id")]
            if owner_id
            else []
        )

    diary_date = date or date_type.today().isoformat()
    owner_pet_id = pet_info.get("id") or pet_id
    photos = [_record_photo(db, await save_upload(img, "photos", request), owner_pet_id) for img in images]

    try:
        result = await run_in_threadpool(
            generate_diary, [p["localPath"] for p in photos], pet_info, diary_date, siblings
        )
    except AIServiceError as e:
        raise _ai_error(e) from e

    result["photoIds"] = [p["id"] for p in photos]
    if save:
        diary, _ = db.upsert(
            "diaries",
            build_diary(
                DiaryRequest(
                    petId=owner_pet_id,
                    date=diary_date,
                    content=result["content"],
                    imagePath=photos[0]["url"],
                    photoIds=result["photoIds"],
                )
            ),
        )
        result["diaryId"] = diary["id"]

    return {"success": True, "data": result}
