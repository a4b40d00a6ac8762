# pvtracker/api/sessions.py

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Path
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from pvtracker.core.dependencies import get_store
from pvtracker.core.exceptions import (
    AttemptClosedError,
    DuplicateSessionError,
    HeightNotFoundError,
    SessionNotFoundError,
)
from pvtracker.models.requests import (
    AttemptResultUpdate,
    EmailShareRequest,
    MeetSessionCreate,
    PracticeSessionCreate,
)
from pvtracker.models.session import MeetSession, PracticeSession, utcnow
from pvtracker.services.email_service import send_session_summary_email
from pvtracker.services.formatting import to_local
from pvtracker.services.store import PoleVaultStore
from pvtracker.services.summary import session_summary_text, summary_subject
from pvtracker.services.weekly_plan import WEEKDAYS, routine_snapshot, today_name

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sessions", tags=["Sessions"])


def _session_or_404(store: PoleVaultStore, session_id: str):
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return session


def _add(store: PoleVaultStore, session):
    try:
        return store.add_session(session).to_json_dict()
    except DuplicateSessionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("")
def list_sessions(store: PoleVaultStore = Depends(get_store)):
    """All sessions, newest first."""
    return [s.to_json_dict() for s in store.sessions]


@router.get("/{session_id}")
def get_session(session_id: str, store: PoleVaultStore = Depends(get_store)):
    return _session_or_404(store, session_id).to_json_dict()


@router.post("/practice")
def create_practice_session(data: PracticeSessionCreate, store: PoleVaultStore = Depends(get_store)):
    """
    Log a practice.

    The routine is a snapshot of the plan day at save time; `done` marks the
    items the athlete checked off.
    """
    date = data.date or utcnow()
    day = data.day_name or today_name(to_local(date))
    if day not in WEEKDAYS:
        raise HTTPException(status_code=422, detail=f"Unknown plan day '{day}'")

    session = PracticeSession(
        date=date,
        day_name=day,
        goals=data.goals,
        notes=data.notes,
        poles=data.poles,
        setup=data.setup,
        routine=routine_snapshot(store.weekly_plan, day, data.done),
        heights=[h.to_block() for h in data.heights],
    )
    logger.info(f"Saving practice for {day} with {len(session.heights)} heights")
    return _add(store, session)


@router.post("/meet")
def create_meet_session(data: MeetSessionCreate, store: PoleVaultStore = Depends(get_store)):
    session = MeetSession(
        date=data.date or utcnow(),
        meet_name=data.meet_name,
        goals=data.goals,
        notes=data.notes,
        poles=data.poles,
        setup=data.setup,
        attempts=[h.to_block() for h in data.heights],
    )
    logger.info(f"Saving meet '{session.meet_name or ''}' with {len(session.attempts)} heights")
    return _add(store, session)


@router.patch("/{session_id}")
def update_session(
    session_id: str,
    patch: Dict[str, Any] = Body(...),
    store: PoleVaultStore = Depends(get_store),
):
    """Merge-patch a session. id, type and date cannot be changed."""
    try:
        return store.update_session(session_id, patch).to_json_dict()
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logger.warning(f"Rejected patch for session {session_id}: {e.error_count()} errors")
        raise HTTPException(status_code=422, detail=e.errors(include_context=False, include_url=False))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{session_id}")
def delete_session(session_id: str, store: PoleVaultStore = Depends(get_store)):
    if not store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found.")
    return {"success": True, "message": "Session deleted"}


@router.put("/{session_id}/heights/{block_id}/attempts/{attempt_number}")
def record_attempt(
    session_id: str,
    block_id: str,
    data: AttemptResultUpdate,
    attempt_number: int = Path(..., ge=1, le=3),
    store: PoleVaultStore = Depends(get_store),
):
    """Set one attempt to clear or miss."""
    try:
        return store.record_attempt(session_id, block_id, attempt_number, data.result).to_json_dict()
    except (SessionNotFoundError, HeightNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttemptClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{session_id}/summary", response_class=PlainTextResponse)
def get_session_summary(session_id: str, store: PoleVaultStore = Depends(get_store)):
    """Share text for one session."""
    session = _session_or_404(store, session_id)
    return session_summary_text(session, store.settings)


@router.post("/{session_id}/share/email")
def share_session_by_email(
    session_id: str,
    data: EmailShareRequest,
    store: PoleVaultStore = Depends(get_store),
):
    session = _session_or_404(store, session_id)
    settings = store.settings
    subject = data.subject or summary_subject(session, settings.athlete)
    text = session_summary_text(session, settings)

    if not send_session_summary_email(str(data.to), subject, text):
        raise HTTPException(status_code=502, detail="Could not send the session summary. Please try again.")
    return {"success": True, "message": f"Summary sent to {data.to}"}
