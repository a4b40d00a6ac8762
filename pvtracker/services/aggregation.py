# services/aggregation.py
"""
Derived numbers over the session log: personal record and averages.

Nothing here is stored; callers recompute from the full session list
whenever they need a value. Every function accepts an empty or missing
list and returns 0 / None rather than raising.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from pvtracker.models.pole import Pole
from pvtracker.models.session import PracticeSession, Session
from .units import parse_number

logger = logging.getLogger(__name__)


def calc_pr(sessions: Optional[Iterable[Session]]) -> float:
    """
    Best cleared bar height across all meet sessions, in inches.

    Practice heights never count. Returns 0 when nothing was ever cleared.
    """
    best = 0.0
    for s in sessions or []:
        if getattr(s, "type", None) != "meet":
            continue
        for block in s.attempts or []:
            if block.cleared:
                best = max(best, parse_number(block.height_in))
    return best


def avg_of(values: Optional[Iterable[Any]]) -> float:
    items = list(values or [])
    if not items:
        return 0.0
    return sum(parse_number(v) for v in items) / len(items)


def _setup_values(sessions: Optional[Iterable[Session]], field: str) -> List[Any]:
    values = [getattr(s.setup, field, None) for s in sessions or []]
    # unset (None/0) entries are excluded rather than averaged in as 0
    return [v for v in values if v]


def average_takeoff(sessions: Optional[Iterable[Session]]) -> float:
    return avg_of(_setup_values(sessions, "takeoff_in"))


def average_standards(sessions: Optional[Iterable[Session]]) -> float:
    return avg_of(_setup_values(sessions, "standards_in"))


def average_steps(sessions: Optional[Iterable[Session]]) -> float:
    return avg_of(_setup_values(sessions, "steps"))


def latest_practice(sessions: Optional[Iterable[Session]]) -> Optional[PracticeSession]:
    latest = None
    for s in sessions or []:
        if s.type == "practice" and (latest is None or s.date > latest.date):
            latest = s
    return latest


def previous_poles(sessions: Optional[Iterable[Session]]) -> List[Pole]:
    """Every pole used so far, first occurrence per brand|length|flex|weight."""
    seen = set()
    poles = []
    for s in sessions or []:
        for pole in s.poles:
            key = pole.identity_key
            if key == "|||" or key in seen:
                continue
            seen.add(key)
            poles.append(pole)
    return poles


def session_stats(sessions: Optional[Iterable[Session]]) -> Dict[str, Any]:
    """Numbers behind the home and stats screens, all lengths in inches."""
    sessions = list(sessions or [])
    latest = latest_practice(sessions)
    stats = {
        "pr_in": calc_pr(sessions),
        "avg_takeoff_in": average_takeoff(sessions),
        "avg_standards_in": average_standards(sessions),
        "avg_steps": average_steps(sessions),
        "session_count": len(sessions),
        "meet_count": sum(1 for s in sessions if s.type == "meet"),
        "practice_count": sum(1 for s in sessions if s.type == "practice"),
        "latest_practice_id": latest.id if latest else None,
        "latest_practice_setup": latest.setup if latest else None,
    }
    logger.debug(f"Computed stats over {len(sessions)} sessions: PR={stats['pr_in']}")
    return stats
