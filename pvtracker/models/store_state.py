# models/store_state.py
from typing import Dict, List

from pydantic import Field

from .common import CamelModel
from .session import Session
from .settings import Settings
from .weekly_plan import DayPlan


class AttemptVideo(CamelModel):
    id: str
    uri: str
    title: str = ""
    added_at: int = 0  # epoch milliseconds


class StoreState(CamelModel):
    """Everything the tracker persists, as one versioned blob."""
    settings: Settings = Field(default_factory=Settings)
    sessions: List[Session] = Field(default_factory=list)
    weekly_plan: Dict[str, DayPlan] = Field(default_factory=dict)
    attempt_videos: Dict[str, List[AttemptVideo]] = Field(default_factory=dict)
