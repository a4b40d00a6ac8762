# pvtracker/api/attempt_videos.py

import logging
from fastapi import APIRouter, Depends, HTTPException, Path

from pvtracker.core.dependencies import get_store
from pvtracker.models.requests import VideoCreate, VideoRename
from pvtracker.services.store import PoleVaultStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/videos/{session_id}/{height_in}/{attempt}", tags=["Attempt Videos"])

# Clips are keyed by session, height and attempt number; the session itself
# is not looked up, so clips survive a deleted session.


@router.get("")
def list_attempt_videos(
    session_id: str,
    height_in: float,
    attempt: int = Path(..., ge=1, le=3),
    store: PoleVaultStore = Depends(get_store),
):
    return [v.to_json_dict() for v in store.get_attempt_videos(session_id, height_in, attempt)]


@router.post("")
def add_attempt_video(
    session_id: str,
    height_in: float,
    data: VideoCreate,
    attempt: int = Path(..., ge=1, le=3),
    store: PoleVaultStore = Depends(get_store),
):
    item = store.add_attempt_video(session_id, height_in, attempt, data.uri, data.title)
    logger.info(f"Added clip {item.id} to {session_id} at {height_in}in attempt {attempt}")
    return item.to_json_dict()


@router.patch("/{video_id}")
def rename_attempt_video(
    session_id: str,
    height_in: float,
    video_id: str,
    data: VideoRename,
    attempt: int = Path(..., ge=1, le=3),
    store: PoleVaultStore = Depends(get_store),
):
    if not store.rename_attempt_video(session_id, height_in, attempt, video_id, data.title):
        raise HTTPException(status_code=404, detail="Video not found")
    return {"success": True, "message": "Video renamed"}


@router.delete("/{video_id}")
def delete_attempt_video(
    session_id: str,
    height_in: float,
    video_id: str,
    attempt: int = Path(..., ge=1, le=3),
    store: PoleVaultStore = Depends(get_store),
):
    if not store.delete_attempt_video(session_id, height_in, attempt, video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    return {"success": True, "message": "Video deleted"}
