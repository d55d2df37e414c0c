"""
Main entrypoint for the Pet Diary backend application.

This module initializes the FastAPI instance, mounts the CORS middleware for
the mobile client, renders every error as the API's JSON envelope, loads the
JSON store on startup and includes the unified APIRouter.
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import core.config as config
import core.state as state
from api.router import api_router
from core.database import get_store
from services.background_scan import background_scan_manager

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Pet Diary Mock Server", version=config.VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    state.add_log(f"Server error on {request.method} {request.url.path}: {exc}", logging.ERROR)
    return JSONResponse(status_code=500, content={"success": False, "message": str(exc) or "Internal server error"})


@app.on_event("startup")
async def startup_event() -> None:
    """Application startup hook loading the JSON store and re-arming background scans."""
    for folder in config.UPLOAD_FOLDERS:
        os.makedirs(os.path.join(config.UPLOAD_DIR, folder), exist_ok=True)

    counts = get_store().counts()
    state.add_log(f"Pet Diary Mock Server {config.VERSION} listening on {config.HOST}:{config.PORT}")
    state.add_log(f"Database {config.DB_FILE}: " + ", ".join(f"{k}={v}" for k, v in counts.items()))

    if background_scan_manager.is_enabled:
        background_scan_manager.schedule()


@app.on_event("shutdown")
async def shutdown_event() -> None:
    background_scan_manager.cancel()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=True)
