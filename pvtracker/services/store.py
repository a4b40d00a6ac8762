# services/store.py
"""
The tracker's state container.

`PoleVaultStore` owns the in-memory `StoreState` and exposes command methods
for every change. Each command builds a new state object and swaps it in
(replace-on-write), then flushes the whole blob to the database. Flushing is
fire-and-forget: a failed write is logged and the in-memory state stays
authoritative.

The store is passed explicitly to whatever needs it (the API gets it through
a FastAPI dependency); there is no module-level instance.
"""
import asyncio
import logging
import secrets
import threading
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy.orm import sessionmaker

from pvtracker.core.exceptions import (
    DuplicateSessionError,
    HeightNotFoundError,
    SessionNotFoundError,
)
from pvtracker.db.db_access import load_store_blob, save_store_blob
from pvtracker.models.session import IMMUTABLE_SESSION_FIELDS, Session, session_adapter
from pvtracker.models.settings import Athlete, Settings
from pvtracker.models.store_state import AttemptVideo, StoreState
from pvtracker.models.weekly_plan import DayPlan, WeeklyPlan
from .migrations import STORE_VERSION, default_state, migrate_state
from .units import parse_number, to_inches
from .weekly_plan import WEEKDAYS, default_weekly_plan

logger = logging.getLogger(__name__)

_ATHLETE_FIELD_NAMES = {to_camel(name): name for name in Athlete.model_fields}
_ATHLETE_FIELD_NAMES.update({name: name for name in Athlete.model_fields})


def _camel_key(key: str) -> str:
    return to_camel(key) if "_" in key else key


# Setup values that older clients still send flat on the session
LEGACY_SETUP_KEYS = {
    "steps": "steps",
    "approachIn": "approachIn",
    "takeoffIn": "takeoffIn",
    "standardsIn": "standardsIn",
    "heightIn": "barIn",
}


def _setup_patch(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pull setup changes out of a session patch, both the nested `setup` object
    and the legacy flat keys. Returns camelCase setup keys; `changes` loses
    the flat keys.
    """
    setup = changes.pop("setup", None) or {}
    if not isinstance(setup, dict):
        raise ValueError("setup must be an object")
    patch = {_camel_key(k): v for k, v in setup.items()}
    for flat, key in LEGACY_SETUP_KEYS.items():
        if flat in changes:
            patch[key] = changes.pop(flat)
    if "approachFeet" in changes or "approachInches" in changes:
        patch["approachIn"] = to_inches(changes.pop("approachFeet", 0), changes.pop("approachInches", 0))
    return patch


def _js_number(value: Any) -> str:
    number = parse_number(value)
    return str(int(number)) if number.is_integer() else str(number)


def attempt_video_key(session_id: str, height_in: Any, attempt_number: Any) -> str:
    """Bucket key for the clips of one attempt, e.g. 'abc::h=150::a=2'."""
    return f"{session_id}::h={_js_number(height_in)}::a={_js_number(attempt_number)}"


def new_video_item(uri: str, title: str = "") -> AttemptVideo:
    now_ms = int(time.time() * 1000)
    return AttemptVideo(
        id=f"{now_ms}_{secrets.token_hex(3)}",
        uri=uri,
        title=title or f"Clip {datetime.now().strftime('%m/%d/%Y, %I:%M:%S %p')}",
        added_at=now_ms,
    )


class PoleVaultStore:
    """
    In-memory tracker state with optional database persistence.

    Without a session factory the store is memory-only (handy in tests).
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None, state: Optional[StoreState] = None):
        self._factory = session_factory
        self._state = state or StoreState.model_validate(default_state())
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Loading & persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, session_factory: sessionmaker) -> "PoleVaultStore":
        """Read, migrate and validate the persisted blob."""
        result = load_store_blob(session_factory)
        if not result:
            raise RuntimeError(result.message)

        version = result.data["version"]
        persisted = result.data["state"]
        state = StoreState.model_validate(migrate_state(persisted, version))
        store = cls(session_factory, state)

        if persisted is None or version != STORE_VERSION:
            store.flush()
        logger.info(f"Store loaded: {len(state.sessions)} sessions, version {STORE_VERSION}")
        return store

    def flush(self) -> bool:
        if self._factory is None:
            return True
        result = save_store_blob(self._state.to_json_dict(), STORE_VERSION, self._factory)
        if not result:
            logger.warning(f"Store flush failed, keeping in-memory state: {result.message}")
        return bool(result)

    def _commit(self, **changes) -> None:
        # callers hold the lock
        self._state = self._state.model_copy(update=changes)
        self.flush()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state.model_copy(deep=True)

    @property
    def settings(self) -> Settings:
        return self._state.settings.model_copy(deep=True)

    @property
    def sessions(self) -> List[Session]:
        return [s.model_copy(deep=True) for s in self._state.sessions]

    @property
    def weekly_plan(self) -> WeeklyPlan:
        return {day: plan.model_copy(deep=True) for day, plan in self._state.weekly_plan.items()}

    @property
    def attempt_videos(self) -> Dict[str, List[AttemptVideo]]:
        return {k: [v.model_copy() for v in clips] for k, clips in self._state.attempt_videos.items()}

    def get_session(self, session_id: str) -> Optional[Session]:
        for s in self._state.sessions:
            if s.id == session_id:
                return s.model_copy(deep=True)
        return None

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_settings(self, settings: Settings) -> Settings:
        with self._lock:
            self._commit(settings=settings.model_copy(deep=True))
            return self.settings

    def set_units(self, units: str) -> Settings:
        if units not in ("imperial", "metric"):
            raise ValueError(f"Unknown units '{units}'")
        with self._lock:
            self._commit(settings=self._state.settings.model_copy(update={"units": units}))
            return self.settings

    def set_athlete_field(self, field: str, value: Any) -> Athlete:
        name = _ATHLETE_FIELD_NAMES.get(field)
        if name is None:
            raise ValueError(f"Unknown athlete field '{field}'")
        if name == "level" and value not in ("highschool", "college"):
            raise ValueError("Level must be 'highschool' or 'college'")

        with self._lock:
            athlete_data = self._state.settings.athlete.model_dump()
            athlete_data[name] = value
            athlete = Athlete.model_validate(athlete_data)
            self._commit(settings=self._state.settings.model_copy(update={"athlete": athlete}))
            return athlete.model_copy()

    def set_watermark_uri(self, uri: str) -> Settings:
        with self._lock:
            self._commit(settings=self._state.settings.model_copy(update={"watermark_uri": uri or ""}))
            return self.settings

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def add_session(self, session: Session) -> Session:
        """Insert at the front (newest first). Ids must be unique."""
        with self._lock:
            if any(s.id == session.id for s in self._state.sessions):
                raise DuplicateSessionError(session.id)
            self._commit(sessions=[session.model_copy(deep=True)] + list(self._state.sessions))
            logger.info(f"Added {session.type} session {session.id}")
            return session.model_copy(deep=True)

    def update_session(self, session_id: str, patch: Dict[str, Any]) -> Session:
        """
        Merge `patch` (camelCase or snake_case keys) into a session.

        Identity fields (id, type, date) are never changed. `setup` is merged
        field by field, and flat legacy keys (`takeoffIn`, `heightIn`, ...)
        land in it. The merged record is validated as a whole; a
        ValidationError leaves the store untouched.
        """
        with self._lock:
            sessions = list(self._state.sessions)
            for i, current in enumerate(sessions):
                if current.id == session_id:
                    break
            else:
                raise SessionNotFoundError(session_id)

            changes = {_camel_key(k): v for k, v in patch.items()}
            ignored = [k for k in changes if k in IMMUTABLE_SESSION_FIELDS]
            if ignored:
                logger.warning(f"Ignoring changes to immutable session fields {ignored} on {session_id}")
            setup = _setup_patch(changes)
            merged = current.model_dump(by_alias=True)
            merged.update({k: v for k, v in changes.items() if k not in IMMUTABLE_SESSION_FIELDS})
            # setup merges field by field; unsent values are kept
            merged["setup"] = {**merged["setup"], **setup}

            updated = session_adapter.validate_python(merged)
            sessions[i] = updated
            self._commit(sessions=sessions)
            return updated.model_copy(deep=True)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            remaining = [s for s in self._state.sessions if s.id != session_id]
            if len(remaining) == len(self._state.sessions):
                return False
            self._commit(sessions=remaining)
            logger.info(f"Deleted session {session_id}")
            return True

    def record_attempt(self, session_id: str, block_id: str, attempt_number: int, result: str) -> Session:
        """
        Set one attempt's result on a height block of a session.

        Marking a clear closes the height: later attempts reset to misses,
        and recording anything after a clear raises AttemptClosedError.
        """
        with self._lock:
            session = next((s for s in self._state.sessions if s.id == session_id), None)
            if session is None:
                raise SessionNotFoundError(session_id)

            field = session.BLOCKS_FIELD
            blocks = list(session.height_blocks())
            for i, block in enumerate(blocks):
                if block.id == block_id:
                    blocks[i] = block.with_result(attempt_number, result)
                    break
            else:
                raise HeightNotFoundError(block_id)

            updated = session.model_copy(update={field: blocks})
            self._commit(sessions=[updated if s.id == session_id else s for s in self._state.sessions])
            return updated.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Weekly plan
    # ------------------------------------------------------------------

    def set_weekly_plan(self, plan: WeeklyPlan) -> WeeklyPlan:
        missing = [day for day in WEEKDAYS if day not in plan]
        if missing:
            raise ValueError(f"Weekly plan is missing {', '.join(missing)}")
        with self._lock:
            new_plan = {day: DayPlan.model_validate(plan[day]).model_copy(deep=True) for day in WEEKDAYS}
            self._commit(
                weekly_plan=new_plan,
                settings=self._state.settings.model_copy(update={"plan_overridden": True}),
            )
            logger.info("Weekly plan replaced by upload")
            return self.weekly_plan

    def reset_weekly_plan(self) -> WeeklyPlan:
        with self._lock:
            self._commit(
                weekly_plan=default_weekly_plan(),
                settings=self._state.settings.model_copy(update={"plan_overridden": False}),
            )
            logger.info("Weekly plan reset to default")
            return self.weekly_plan

    # ------------------------------------------------------------------
    # Attempt videos
    # ------------------------------------------------------------------

    def get_attempt_videos(self, session_id: str, height_in: Any, attempt_number: Any) -> List[AttemptVideo]:
        key = attempt_video_key(session_id, height_in, attempt_number)
        return [v.model_copy() for v in self._state.attempt_videos.get(key, [])]

    def _replace_clips(self, key: str, clips: List[AttemptVideo]) -> None:
        videos = dict(self._state.attempt_videos)
        videos[key] = clips
        self._commit(attempt_videos=videos)

    def add_attempt_video(self, session_id: str, height_in: Any, attempt_number: Any,
                          uri: str, title: str = "") -> AttemptVideo:
        key = attempt_video_key(session_id, height_in, attempt_number)
        item = new_video_item(uri, title)
        with self._lock:
            self._replace_clips(key, [item] + list(self._state.attempt_videos.get(key, [])))
        return item

    def rename_attempt_video(self, session_id: str, height_in: Any, attempt_number: Any,
                             video_id: str, new_title: str) -> bool:
        key = attempt_video_key(session_id, height_in, attempt_number)
        with self._lock:
            clips = self._state.attempt_videos.get(key, [])
            if not any(v.id == video_id for v in clips):
                return False
            self._replace_clips(key, [
                v.model_copy(update={"title": new_title}) if v.id == video_id else v for v in clips
            ])
            return True

    def delete_attempt_video(self, session_id: str, height_in: Any, attempt_number: Any, video_id: str) -> bool:
        key = attempt_video_key(session_id, height_in, attempt_number)
        with self._lock:
            clips = self._state.attempt_videos.get(key, [])
            remaining = [v for v in clips if v.id != video_id]
            if len(remaining) == len(clips):
                return False
            self._replace_clips(key, remaining)
            return True


async def initialize_store(session_factory: sessionmaker) -> PoleVaultStore:
    """
    Load the store before the app serves anything.

    Never raises: if loading or migration fails the app starts from the
    default state and the error is logged.
    """
    try:
        return await asyncio.to_thread(PoleVaultStore.load, session_factory)
    except Exception as e:
        logger.exception(f"❌ Could not load the persisted store, starting from defaults: {e}")
        return PoleVaultStore(session_factory)
