# models/__init__.py
"""
Pydantic models for the tracker state and request/response validation
"""

from .common import CamelModel

from .settings import (
    Athlete,
    Settings,
    ATHLETE_FIELDS,
)

from .weekly_plan import (
    RoutineEntry,
    DayPlan,
    WeeklyPlan,
)

from .pole import Pole

from .session import (
    Attempt,
    HeightAttempt,
    SessionSetup,
    PracticeSession,
    MeetSession,
    Session,
    session_adapter,
)

from .store_state import (
    AttemptVideo,
    StoreState,
)

__all__ = [
    "CamelModel",

    # Settings
    "Athlete",
    "Settings",
    "ATHLETE_FIELDS",

    # Weekly plan
    "RoutineEntry",
    "DayPlan",
    "WeeklyPlan",

    # Poles
    "Pole",

    # Sessions
    "Attempt",
    "HeightAttempt",
    "SessionSetup",
    "PracticeSession",
    "MeetSession",
    "Session",
    "session_adapter",

    # Store
    "AttemptVideo",
    "StoreState",
]
