"""
API router for pet profiles and the photos linked to each pet.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

import core.config as config
import core.state as state
from core.database import get_db
from core.store import JsonStore, new_id, utc_now
from models.schemas import PetPhotoLinkRequest, PetProfileRequest

router = APIRouter()


@router.post("/pets/profile")
async def sync_pet_profile(req: PetProfileRequest, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Creates or replaces a pet profile keyed by its ``id``."""
    pet = req.as_record()
    if config.VERBOSE:
        state.add_log(f"Pet profile sync request: {pet}")

    pet["id"] = pet.get("id") or new_id()
    now = utc_now()
    existing = db.find("pets", pet["id"])
    pet["createdAt"] = existing.get("createdAt", now) if existing else now
    pet["updatedAt"] = now

    _, created = db.upsert("pets", pet)
    state.add_log(f"{'Created' if created else 'Updated'} pet profile: {pet.get('name')}")

    return {"success": True, "data": {"petId": pet["id"], "syncedAt": now}, "message": "synced"}


@router.get("/pets")
async def list_pets(db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    return {"success": True, "data": db.all("pets")}


@router.get("/pets/{pet_id}/profile")
async def get_pet_profile(pet_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    pet = db.find("pets", pet_id)
    if not pet:
        raise HTTPException(status_code=404, detail="Pet profile not found")
    return {"success": True, "data": pet}


@router.delete("/pets/{pet_id}")
async def delete_pet(pet_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Removes a pet profile. Diaries and photo links that reference it are left alone."""
    removed = db.delete("pets", pet_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Pet profile not found")
    state.add_log(f"Deleted pet profile: {removed.get('name')}")
    return {"success": True, "data": {"petId": pet_id}}


@router.post("/pets/{pet_id}/photos")
async def link_pet_photo(pet_id: str, req: PetPhotoLinkRequest, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Records that a photo shows the given pet."""
    body = req.as_record()
    if not body.get("photoId"):
        raise HTTPException(status_code=400, detail="photoId is required")

    link = {**body, "id": new_id(), "petId": pet_id, "createdAt": utc_now()}
    db.insert("pet_photos", link)
    return {"success": True, "data": link}


@router.get("/pets/{pet_id}/photos")
async def list_pet_photos(pet_id: str, db: JsonStore = Depends(get_db)) -> dict[str, Any]:
    """Lists a pet's photo links, each carrying the linked photo record when it still exists."""
    links = [{**link, "photo": db.find("photos", link.get("photoId"))} for link in db.filter("pet_photos", petId=pet_id)]
    return {"success": True, "data": links}
