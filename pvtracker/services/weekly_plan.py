# services/weekly_plan.py
"""
Weekly practice plan: the built-in default, plan-file import and the
per-day routine snapshot copied into a practice session.

Plan files are plain JSON with the seven weekday names as keys:

    {"Monday": {"goals": "Vault day", "routine": ["Drills:", "  Rope drill"]}, ...}

A routine line ending in ":" is a section header. That convention only
exists in the file format; once imported every entry carries an explicit
`isHeader` flag.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pvtracker.core.exceptions import PlanValidationError
from pvtracker.models.weekly_plan import DayPlan, RoutineEntry, WeeklyPlan

logger = logging.getLogger(__name__)

WEEKDAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

INVALID_JSON_MESSAGE = "Uploaded file is not valid JSON."
INVALID_PLAN_MESSAGE = "Plan file format is not valid. Must match week plan structure."

DEFAULT_PLAN_FILE: Dict[str, Dict[str, Any]] = {
    "Sunday": {
        "goals": "Rest",
        "routine": ["Recovery jog 20 min", "Mobility & foam roll"],
    },
    "Monday": {
        "goals": "Vault day",
        "routine": [
            "Drills:",
            "  Start with warmup drills (thick mat, hurdles). On the way back from each drill do grapevine both ways and run backwards:",
            "  2× Sidestep hurdles (both ways)",
            "  2× Step over hurdles",
            "  2× Hop over hurdles",
            "  2× Crawl under",
            "  2× Crab crawl",
            "Runway:",
            "  One arm — stretch top arm; keep form into the pit",
            "  Sweep — keep form; avoid dropping head/shoulders",
            "  Sweep with turns — ¼, ½, full",
            "  Press — top hand highest, bottom arm straight, knee driven; swing through (not inverted)",
            "  Full vault",
            "Lift: In Volt — Plyometric / explosive focused",
        ],
    },
    "Tuesday": {
        "goals": "Sprint warm up with Sprints",
        "routine": [
            "Sprint warm up:",
            "  2×5 Mini hurdles w/ pole — stay tall; plant after last hurdle and jump",
            "  2×5 Mini hurdles w/o pole — stay tall; jump after last hurdle",
            "Bubkas — progression:",
            "  Static bubkas on dip bars (target 3×10 before progressing)",
            "  Negatives on bar (slow descent)",
            "  Partials on bar: ankle → knee (10 good reps)",
            "  Full rep on bar: ankle → hip",
            "  End goal: full bubka with swing",
            "Core circuit — 3 rounds:",
            "  Plank with shoulder taps — 30s",
            "  Dead bugs — 12 each side",
            "  Russian twists — 20 reps (10/side)",
            "  Reach-through plank — 30s",
            "  Sandbag/weight drag under body until time",
        ],
    },
    "Wednesday": {
        "goals": "Vault Day",
        "routine": [
            "Drills before/during Full Vault Day:",
            "  1) Rope drill",
            "  2) Ring drill",
            "  3) Bendy pole drill",
            "  4) Wall plant w/ comp pole",
            "Runway:",
            "  1) One arm",
            "  2) Sweep",
            "  3) Sweep with turns",
            "  4) Press",
            "  5) Full vault",
        ],
    },
    "Thursday": {
        "goals": "Recovery Day",
        "routine": ["Light jog", "Mobility & foam roll", "Stretching"],
    },
    "Friday": {
        "goals": "Sprint Workout",
        "routine": [
            "Sprint warm up:",
            "  2×5 Mini hurdles w/ pole",
            "  2×5 Mini hurdles w/o pole",
            "Choose one:",
            "  2 × (3–5 × 30–50m sprints)",
            "  2 × 5 × 80m @ ~80% (1 min between reps, 8 min between sets)",
            "  2 × 80m @ ~95% (8 min rest) + 2 × 120m @ ~95% (10 min rest)",
        ],
    },
    "Saturday": {
        "goals": "Lift in Volt (lower body heavy)",
        "routine": [],
    },
}


def is_routine_header(text: Any) -> bool:
    return isinstance(text, str) and text.strip().endswith(":")


def routine_entry(item: Any) -> RoutineEntry:
    """
    Build a RoutineEntry from a plan-file line or an already structured entry.

    Structured entries without an explicit `isHeader` fall back to the
    trailing-colon rule on their text.
    """
    if isinstance(item, RoutineEntry):
        return item.model_copy()
    if isinstance(item, dict):
        text = str(item.get("text") or "")
        header = item.get("isHeader", item.get("is_header"))
        return RoutineEntry(
            text=text,
            done=bool(item.get("done")),
            is_header=is_routine_header(text) if header is None else bool(header),
        )
    text = "" if item is None else str(item)
    return RoutineEntry(text=text, is_header=is_routine_header(text))


def routine_entries(items: Optional[Iterable[Any]]) -> List[RoutineEntry]:
    return [routine_entry(item) for item in items or []]


def validate_plan_file(doc: Any) -> bool:
    """True when `doc` has all seven days, each with a list routine and string goals."""
    if not isinstance(doc, dict) or not doc:
        return False
    for day in WEEKDAYS:
        entry = doc.get(day)
        if not isinstance(entry, dict):
            return False
        if not isinstance(entry.get("routine"), list):
            return False
        if not isinstance(entry.get("goals"), str):
            return False
    return True


def plan_from_document(doc: Dict[str, Any]) -> WeeklyPlan:
    """Convert a validated plan document; keys other than the weekdays are dropped."""
    return {
        day: DayPlan(goals=doc[day]["goals"], routine=routine_entries(doc[day]["routine"]))
        for day in WEEKDAYS
    }


def parse_plan_file(content: Any) -> WeeklyPlan:
    """
    Parse an uploaded plan file (str/bytes) into a WeeklyPlan.

    Raises PlanValidationError with a user-facing message; nothing is
    partially applied.
    """
    if isinstance(content, (bytes, bytearray)):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError:
            raise PlanValidationError(INVALID_JSON_MESSAGE)
    try:
        doc = json.loads(content)
    except (TypeError, ValueError):
        logger.warning("Rejected plan upload: not valid JSON")
        raise PlanValidationError(INVALID_JSON_MESSAGE)

    if not validate_plan_file(doc):
        logger.warning("Rejected plan upload: does not match the weekly plan structure")
        raise PlanValidationError(INVALID_PLAN_MESSAGE)

    extra = sorted(set(doc) - set(WEEKDAYS))
    if extra:
        logger.info(f"Ignoring unknown keys in plan upload: {extra}")
    return plan_from_document(doc)


def default_weekly_plan() -> WeeklyPlan:
    """A fresh copy of the built-in plan."""
    return plan_from_document(DEFAULT_PLAN_FILE)


def is_complete_plan(plan: Any) -> bool:
    return isinstance(plan, dict) and len(plan) == 7 and all(day in plan for day in WEEKDAYS)


def today_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    # datetime.weekday() is Monday=0; the plan week starts on Sunday
    return WEEKDAYS[(now.weekday() + 1) % 7]


def day_plan(plan: WeeklyPlan, day: str) -> DayPlan:
    return plan.get(day) or DayPlan()


def routine_snapshot(plan: WeeklyPlan, day: str, done: Optional[Iterable[int]] = None) -> List[RoutineEntry]:
    """
    Copy a day's routine for a new practice session.

    `done` lists the positions the athlete checked off; headers are never
    checkable. The copy is independent of the plan, so later plan changes do
    not touch logged sessions.
    """
    checked = set(done or [])
    return [
        RoutineEntry(text=e.text, is_header=e.is_header, done=(i in checked and not e.is_header))
        for i, e in enumerate(day_plan(plan, day).routine)
    ]


def plan_to_document(plan: WeeklyPlan) -> Dict[str, Any]:
    """Plan back to the upload file format (plain string routines)."""
    return {
        day: {"goals": day_plan(plan, day).goals, "routine": [e.text for e in day_plan(plan, day).routine]}
        for day in WEEKDAYS
    }
