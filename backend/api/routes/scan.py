"""
API router logic for the photo-library scanner: scheduling, manual runs, streaming and control.
"""

import json
from collections.abc import Iterator
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

import core.config as config
import core.state as state
from models.schemas import ScanControlRequest
from services import scan_worker
from services.background_scan import background_scan_manager
from services.processed_store import processed_store

router = APIRouter()


def _ensure_idle() -> None:
    if state.SCAN_STATE != "idle":
        raise HTTPException(status_code=409, detail="A scan is already in progress")


def _claim_scan() -> None:
    if not state.try_start_scan():
        raise HTTPException(status_code=409, detail="A scan is already in progress")


@router.get("/status")
async def scan_status() -> dict[str, Any]:
    last = processed_store.last_scan_time
    return {
        "success": True,
        "data": {
            "state": state.SCAN_STATE,
            "total": state.current_scan_total,
            "processed": state.current_scan_processed,
            "enabled": background_scan_manager.is_enabled,
            "scheduled": background_scan_manager.is_scheduled,
            "hasPermission": scan_worker.has_permission(),
            "lastScanTime": last.isoformat() if last else None,
        },
    }


@router.post("/enable")
async def enable_background_scan() -> dict[str, Any]:
    if not background_scan_manager.enable():
        raise HTTPException(status_code=403, detail="No permission to access the photo library")
    return {"success": True, "data": {"enabled": True}}


@router.post("/disable")
async def disable_background_scan() -> dict[str, Any]:
    background_scan_manager.disable()
    return {"success": True, "data": {"enabled": False}}


@router.post("/manual")
async def manual_scan(limit: int = Query(config.MANUAL_SCAN_LIMIT, ge=1)) -> dict[str, Any]:
    """Scans immediately and returns every pet photo found once the scan ends."""
    _claim_scan()
    results = await run_in_threadpool(background_scan_manager.perform_manual_scan, limit, True)
    return {"success": True, "data": {"results": results, "totalFound": len(results)}}


@router.get("/stream")
async def stream_scan(limit: int = Query(config.MANUAL_SCAN_LIMIT, ge=1)) -> StreamingResponse:
    """Scans immediately, sending each pet photo as an NDJSON line as soon as it is found.

    The scanner is claimed before the response starts, so a second request is refused
    with 409 even while this body has not been read yet.
    """
    _claim_scan()

    def event_lines() -> Iterator[str]:
        found = 0
        for result in scan_worker.iter_scan(limit=limit, claimed=True):
            found += 1
            event = state.push_scan_event("scanResult", result.to_dict())
            yield json.dumps(event) + "\n"
        yield json.dumps(state.push_scan_event("scanComplete", {"totalFound": found})) + "\n"

    return StreamingResponse(event_lines(), media_type="application/x-ndjson")


@router.get("/events")
async def scan_events(since: int = Query(0, ge=0)) -> dict[str, Any]:
    """Returns buffered scan events with a sequence number greater than ``since``."""
    return {"success": True, "data": state.scan_events_since(since)}


@router.post("/control")
async def control_scan(req: ScanControlRequest) -> dict[str, Any]:
    """Pauses, resumes or cancels the running scan."""
    action = req.action.lower()
    if action == "pause" and state.SCAN_STATE == "running":
        state.SCAN_STATE = "paused"
    elif action == "resume" and state.SCAN_STATE == "paused":
        state.SCAN_STATE = "running"
    elif action == "cancel" and state.SCAN_STATE in ("running", "paused"):
        state.SCAN_STATE = "cancelled"
    elif action not in ("pause", "resume", "cancel"):
        raise HTTPException(status_code=400, detail=f"Unknown scan action: {req.action}")
    else:
        raise HTTPException(status_code=409, detail=f"Cannot {action} while scanner is {state.SCAN_STATE}")

    state.add_log(f"Scan {action} requested")
    return {"success": True, "data": {"state": state.SCAN_STATE}}


@router.post("/reset")
async def reset_processed() -> dict[str, Any]:
    """Forgets which assets were processed so the next scan looks at them again."""
    _ensure_idle()
    scan_worker.reset_processed_photos()
    return {"success": True, "message": "Processed photo records cleared"}
