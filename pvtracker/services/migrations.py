# services/migrations.py
"""
Load-time upgrade of the persisted store blob.

The blob has been written by several app revisions. Older ones stored setup
numbers flat on each session (`steps`, `takeoffIn`, `standardsIn`,
`heightIn`, ...), stored routines as bare strings, and logged meet attempts
as a flat list of `{heightIn, result}` rows. Everything is mapped to the
current shape here, once, so the rest of the code only ever sees canonical
sessions.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from pvtracker.models.session import ATTEMPTS_PER_HEIGHT, new_id, session_adapter
from pvtracker.models.settings import Settings
from .formatting import to_local
from .units import parse_number, parse_optional_number, to_inches
from .weekly_plan import (
    DEFAULT_PLAN_FILE,
    WEEKDAYS,
    is_complete_plan,
    routine_entries,
    today_name,
)

logger = logging.getLogger(__name__)

# Bumped whenever the blob layout changes; 14 added attemptVideos
STORE_VERSION = 14

STORE_KEYS = ("settings", "sessions", "weeklyPlan", "attemptVideos")


def default_state() -> Dict[str, Any]:
    return {
        "settings": Settings().to_json_dict(),
        "sessions": [],
        "weeklyPlan": _plan_document(DEFAULT_PLAN_FILE),
        "attemptVideos": {},
    }


# ------------------------------------------------------------------
# Sessions
# ------------------------------------------------------------------

def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _session_date(value: Any) -> str:
    """ISO timestamp from an ISO string or epoch milliseconds; now() if unusable."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).isoformat()
        except ValueError:
            pass
    logger.warning(f"Session has no usable date ({value!r}); stamping it with the current time")
    return datetime.now(timezone.utc).isoformat()


def _setup(raw: Dict[str, Any]) -> Dict[str, Any]:
    if isinstance(raw.get("setup"), dict):
        setup = raw["setup"]
        return {
            "steps": parse_optional_number(setup.get("steps")),
            "approachIn": parse_optional_number(setup.get("approachIn")),
            "takeoffIn": parse_optional_number(setup.get("takeoffIn")),
            "standardsIn": parse_optional_number(setup.get("standardsIn")),
            "barIn": parse_optional_number(setup.get("barIn")),
        }

    approach = parse_optional_number(raw.get("approachIn"))
    if approach is None and (raw.get("approachFeet") or raw.get("approachInches")):
        approach = to_inches(raw.get("approachFeet"), raw.get("approachInches"))

    return {
        "steps": parse_optional_number(raw.get("steps")),
        "approachIn": approach,
        "takeoffIn": parse_optional_number(raw.get("takeoffIn")),
        "standardsIn": parse_optional_number(raw.get("standardsIn")),
        "barIn": parse_optional_number(raw.get("heightIn")),
    }


def _slot_results(results: List[str]) -> List[Dict[str, Any]]:
    """Fit a run of results at one height into the three attempt slots."""
    if "clear" in results:
        results = results[: results.index("clear") + 1]
        if len(results) > ATTEMPTS_PER_HEIGHT:
            results = ["miss"] * (ATTEMPTS_PER_HEIGHT - 1) + ["clear"]
    results = results[:ATTEMPTS_PER_HEIGHT]
    results += ["miss"] * (ATTEMPTS_PER_HEIGHT - len(results))
    return [{"idx": i + 1, "result": r, "type": "bar"} for i, r in enumerate(results)]


def _pole_idx(value: Any) -> Optional[int]:
    number = parse_optional_number(value)
    return None if number is None else int(number)


def _height_blocks(items: Any) -> List[Dict[str, Any]]:
    """
    Canonical height blocks from either block records or legacy attempt rows.

    Legacy rows at the same height are merged into one block, in the order
    the heights were first attempted.
    """
    if not isinstance(items, list):
        return []

    blocks: List[Dict[str, Any]] = []
    legacy: "OrderedDict[float, Dict[str, Any]]" = OrderedDict()

    for item in items:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("attempts"), list):
            attempts = [a for a in item["attempts"] if isinstance(a, dict)]
            if len(attempts) > ATTEMPTS_PER_HEIGHT:
                # overlong runs keep a late clear as the last slot
                attempts = _slot_results(["clear" if a.get("result") == "clear" else "miss" for a in attempts])
            blocks.append({
                "id": _text(item.get("id")) or new_id(),
                "heightIn": parse_number(item.get("heightIn")),
                "poleIdx": _pole_idx(item.get("poleIdx")),
                "attempts": attempts,
            })
            continue

        height = parse_number(item.get("heightIn"))
        if height not in legacy:
            legacy[height] = {"id": new_id(), "heightIn": height, "poleIdx": None, "results": []}
            blocks.append(legacy[height])
        legacy[height]["results"].append("clear" if item.get("result") == "clear" else "miss")

    for block in legacy.values():
        block["attempts"] = _slot_results(block.pop("results"))
    return blocks


def upgrade_session(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Map one persisted session record, of any historical shape, to the
    canonical camelCase shape. Returns None for records that are not objects.
    """
    if not isinstance(raw, dict):
        return None

    kind = "meet" if raw.get("type") == "meet" else "practice"
    date = _session_date(raw.get("date"))
    out: Dict[str, Any] = {
        "id": _text(raw.get("id")) or new_id(),
        "type": kind,
        "date": date,
        "goals": _text(raw.get("goals")),
        "notes": _text(raw.get("notes")),
        "poles": [p for p in raw.get("poles") or [] if isinstance(p, dict)],
        "setup": _setup(raw),
    }

    if kind == "meet":
        out["meetName"] = raw.get("meetName") or None
        out["attempts"] = _height_blocks(raw.get("attempts"))
    else:
        day = raw.get("dayName")
        if not day:
            day = today_name(to_local(datetime.fromisoformat(date)))
        out["dayName"] = day
        out["routine"] = [e.to_json_dict() for e in routine_entries(raw.get("routine"))]
        out["heights"] = _height_blocks(raw.get("heights"))
    return out


def _upgrade_sessions(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []

    upgraded = []
    seen_ids = set()
    for raw in items:
        record = upgrade_session(raw)
        if record is None:
            logger.warning(f"Dropping session record that is not an object: {raw!r}")
            continue
        if record["id"] in seen_ids:
            record["id"] = new_id()
            logger.warning("Duplicate session id found during migration; assigned a new id")
        try:
            session_adapter.validate_python(record)
        except ValidationError as e:
            logger.error(f"Dropping unreadable session {record['id']}: {e}")
            continue
        seen_ids.add(record["id"])
        upgraded.append(record)
    return upgraded


# ------------------------------------------------------------------
# Plan, settings, videos
# ------------------------------------------------------------------

def _plan_document(plan: Dict[str, Any]) -> Dict[str, Any]:
    return {
        day: {
            "goals": _text(plan[day].get("goals")),
            "routine": [e.to_json_dict() for e in routine_entries(plan[day].get("routine"))],
        }
        for day in WEEKDAYS
    }


def _upgrade_plan(plan: Any) -> Dict[str, Any]:
    if not is_complete_plan(plan) or not all(isinstance(plan[d], dict) for d in WEEKDAYS):
        logger.info("Persisted weekly plan missing or incomplete; using the default plan")
        return _plan_document(DEFAULT_PLAN_FILE)
    return _plan_document(plan)


def _upgrade_settings(settings: Any) -> Dict[str, Any]:
    out = Settings().to_json_dict()
    if not isinstance(settings, dict):
        return out
    athlete = settings.get("athlete")
    out.update({k: v for k, v in settings.items() if k != "athlete"})
    if isinstance(athlete, dict):
        out["athlete"].update(athlete)
    return out


def _upgrade_videos(videos: Any) -> Dict[str, List[Dict[str, Any]]]:
    if not isinstance(videos, dict):
        return {}
    return {
        str(key): [v for v in clips if isinstance(v, dict) and v.get("uri")]
        for key, clips in videos.items()
        if isinstance(clips, list)
    }


def migrate_state(persisted: Any, version: Optional[int]) -> Dict[str, Any]:
    """
    Bring a persisted blob written at `version` up to STORE_VERSION.

    Missing top-level keys are backfilled with defaults. The normalization is
    idempotent, so it also runs for blobs already at the current version.
    """
    if not isinstance(persisted, dict):
        logger.info("No persisted store found; starting from defaults")
        return default_state()

    if version is None or version < STORE_VERSION:
        logger.info(f"🔄 Migrating store from version {version} to {STORE_VERSION}")
    elif version > STORE_VERSION:
        logger.warning(f"Store version {version} is newer than this build ({STORE_VERSION})")

    return {
        "settings": _upgrade_settings(persisted.get("settings")),
        "sessions": _upgrade_sessions(persisted.get("sessions")),
        "weeklyPlan": _upgrade_plan(persisted.get("weeklyPlan")),
        "attemptVideos": _upgrade_videos(persisted.get("attemptVideos")),
    }
