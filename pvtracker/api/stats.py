# pvtracker/api/stats.py

import logging
from fastapi import APIRouter, Depends

from pvtracker.core.dependencies import get_store
from pvtracker.services.aggregation import previous_poles, session_stats
from pvtracker.services.formatting import fmt_average_steps, fmt_bar, fmt_standards, fmt_takeoff
from pvtracker.services.store import PoleVaultStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("")
def get_stats(store: PoleVaultStore = Depends(get_store)):
    """PR and averages in inches, plus display strings in the athlete's units."""
    units = store.settings.units
    stats = session_stats(store.sessions)
    setup = stats["latest_practice_setup"]

    return {
        "units": units,
        "prIn": stats["pr_in"],
        "avgTakeoffIn": stats["avg_takeoff_in"],
        "avgStandardsIn": stats["avg_standards_in"],
        "avgSteps": stats["avg_steps"],
        "sessionCount": stats["session_count"],
        "meetCount": stats["meet_count"],
        "practiceCount": stats["practice_count"],
        "latestPracticeId": stats["latest_practice_id"],
        "latestPracticeSetup": setup.to_json_dict() if setup else None,
        "display": {
            "pr": fmt_bar(stats["pr_in"], units),
            "avgTakeoff": fmt_takeoff(stats["avg_takeoff_in"], units),
            "avgStandards": fmt_standards(stats["avg_standards_in"], units),
            "avgSteps": fmt_average_steps(stats["avg_steps"]),
        },
    }


@router.get("/poles")
def get_previous_poles(store: PoleVaultStore = Depends(get_store)):
    """Poles used in earlier sessions, one entry per brand/length/flex/weight."""
    return [p.to_json_dict() for p in previous_poles(store.sessions)]
