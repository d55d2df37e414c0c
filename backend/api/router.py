"""
Main APIRouter registry aggregating all individual route namespaces.
"""

from fastapi import APIRouter

from api.routes import ai, diaries, emotions, pets, photos, scan, system

API_PREFIX = "/api/v1"

api_router = APIRouter()

api_router.include_router(system.root_router, tags=["system"])
api_router.include_router(photos.files_router, tags=["photos"])
api_router.include_router(pets.router, prefix=API_PREFIX, tags=["pets"])
api_router.include_router(photos.router, prefix=API_PREFIX, tags=["photos"])
api_router.include_router(diaries.router, prefix=API_PREFIX, tags=["diaries"])
api_router.include_router(emotions.router, prefix=API_PREFIX, tags=["emotions"])
api_router.include_router(ai.router, prefix=API_PREFIX, tags=["ai"])
api_router.include_router(scan.router, prefix=f"{API_PREFIX}/scan", tags=["scan"])
api_router.include_router(system.router, prefix=API_PREFIX, tags=["system"])
